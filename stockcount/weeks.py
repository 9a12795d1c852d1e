from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Union

WeekInput = Optional[Union[str, date, datetime]]


def _to_date(ts: WeekInput) -> date:
    if ts is None:
        return date.today()
    if isinstance(ts, datetime):
        return ts.date()
    if isinstance(ts, date):
        return ts
    s = str(ts).strip()
    try:
        # Datetime strings are truncated to their date part
        return date.fromisoformat(s[:10])
    except ValueError:
        raise ValueError(f"Not an ISO date: {ts!r}")


def week_start(ts: WeekInput = None) -> str:
    """
    Reporting weeks start on Sunday (day-of-week index 0) at midnight.
    Returns the week key as YYYY-MM-DD.
    """
    d = _to_date(ts)
    days_since_sunday = d.isoweekday() % 7
    return (d - timedelta(days=days_since_sunday)).isoformat()


def shift_week(week_key: str, weeks: int) -> str:
    return (_to_date(week_key) + timedelta(weeks=weeks)).isoformat()


def previous_week_start(ts: WeekInput = None) -> str:
    return shift_week(week_start(ts), -1)
