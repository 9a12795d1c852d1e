"""
Entry points for the weekly schedule.

There is no scheduler in here; cron (or any external clock) runs e.g.

    0 18 * * 1  stockcount-jobs remind     # Monday 6PM reminder
    0 22 * * 1  stockcount-jobs remind     # Monday 10PM reminder
    0 8  * * 2  stockcount-jobs report     # Tuesday 8AM pilferage report
"""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from stockcount.config import configure_logging, load_settings
from stockcount.db import close_db, open_db
from stockcount.services.demo_data import seed_sample_data
from stockcount.services.notifications import Notifier, SmtpNotifier
from stockcount.services.reports import get_pilferage_report
from stockcount.services.status import get_submission_status, missing_stores
from stockcount.weeks import week_start

logger = logging.getLogger("stockcount")


def _deliver(send, *args) -> bool:
    # A failing sender must not fail the job; data is already committed.
    try:
        return bool(send(*args))
    except Exception:
        logger.exception("Notification %s failed", getattr(send, "__name__", send))
        return False


def check_and_notify(conn, notifier: Notifier, week_key: Optional[str] = None) -> dict:
    week = week_key or week_start()
    status = get_submission_status(conn, week)
    missing = missing_stores(status)

    if not missing:
        logger.info("All stores submitted for week %s", week)
        return {"missing": 0, "reminders_sent": 0, "summary_sent": False}

    logger.info("%d store(s) pending for week %s", len(missing), week)
    sent = sum(1 for store in missing if _deliver(notifier.send_store_reminder, store, week))
    summary_sent = _deliver(notifier.send_admin_status_summary, status, week)
    return {"missing": len(missing), "reminders_sent": sent, "summary_sent": summary_sent}


def send_weekly_report(conn, notifier: Notifier, week_key: Optional[str] = None, *, skip_empty: bool = True) -> bool:
    report = get_pilferage_report(conn, week_key)
    if skip_empty and not report["data"]:
        logger.info("No submissions for week %s; report not sent", report["week_start"])
        return False
    return _deliver(notifier.send_pilferage_report, report)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="stockcount-jobs", description="Weekly stock count jobs")
    parser.add_argument("command", choices=["remind", "report", "seed"])
    parser.add_argument("--week", default=None, help="Week start date (YYYY-MM-DD); defaults to the current week")
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(settings.log_level)
    week = week_start(args.week) if args.week else None

    conn = open_db(settings.db_path)
    try:
        logger.info("Running job %s", args.command)
        if args.command == "remind":
            check_and_notify(conn, SmtpNotifier(settings), week)
        elif args.command == "report":
            send_weekly_report(conn, SmtpNotifier(settings), week)
        else:
            seed_sample_data(conn)
    finally:
        close_db(conn)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
