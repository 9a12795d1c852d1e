from __future__ import annotations

from typing import Any, Optional

from stockcount.services.reference import list_active_stores
from stockcount.services.submissions import submitted_stores
from stockcount.weeks import week_start


def get_submission_status(conn, week_key: Optional[str] = None) -> list[dict[str, Any]]:
    """
    One entry per active store for the week, in store-name order.
    Deactivated stores never appear, even when they have facts for the week.
    """
    week = week_key or week_start()
    submitted = {str(r["store_id"]): r for r in submitted_stores(conn, week)}

    out: list[dict[str, Any]] = []
    for store in list_active_stores(conn):
        sub = submitted.get(str(store["store_id"]))
        out.append(
            {
                "store_id": store["store_id"],
                "store_name": store["store_name"],
                "manager_name": store["manager_name"],
                "manager_email": store["manager_email"],
                "submitted": sub is not None,
                "submitted_by": sub["submitted_by"] if sub is not None else None,
                "submitted_at": sub["submitted_at"] if sub is not None else None,
            }
        )
    return out


def missing_stores(status: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [s for s in status if not s["submitted"]]
