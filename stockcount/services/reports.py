from __future__ import annotations

from typing import Any, Optional

import pandas as pd

from stockcount.services.submissions import facts_for_week
from stockcount.utils import safe_div
from stockcount.weeks import shift_week, week_start

FLAG_LOSS = "LOSS"
FLAG_EXCESS = "EXCESS"
FLAG_OK = "OK"

REPORT_COLUMNS = [
    "store_id",
    "store_name",
    "product_id",
    "product_name",
    "opening",
    "received",
    "sold",
    "expected_closing",
    "physical_count",
    "variance",
    "variance_pct",
    "last_week_physical",
    "week_over_week",
    "flag",
]


def classify(variance: float) -> str:
    if variance < 0:
        return FLAG_LOSS
    if variance > 0:
        return FLAG_EXCESS
    return FLAG_OK


def variance_pct(variance: float, expected_closing: float) -> str:
    # Zero expected closing reports "0.00" whatever the variance is.
    return f"{safe_div(variance, expected_closing) * 100:.2f}"


def _report_row(curr, prev) -> dict[str, Any]:
    variance = float(curr["variance"])
    physical = float(curr["physical_count"])
    expected = float(curr["closing_calculated"])
    return {
        "store_id": curr["store_id"],
        "store_name": curr["store_name"],
        "product_id": curr["product_id"],
        "product_name": curr["product_name"],
        "opening": float(curr["opening_stock"]),
        "received": float(curr["received"]),
        "sold": float(curr["sold"]),
        "expected_closing": expected,
        "physical_count": physical,
        "variance": variance,
        "variance_pct": variance_pct(variance, expected),
        "last_week_physical": float(prev["physical_count"]) if prev is not None else None,
        "week_over_week": physical - float(prev["physical_count"]) if prev is not None else None,
        "flag": classify(variance),
    }


def summarize(rows: list[dict[str, Any]]) -> dict[str, Any]:
    loss = [r for r in rows if r["flag"] == FLAG_LOSS]
    excess = [r for r in rows if r["flag"] == FLAG_EXCESS]
    return {
        "total_items": len(rows),
        "loss_items": len(loss),
        "excess_items": len(excess),
        "ok_items": sum(1 for r in rows if r["flag"] == FLAG_OK),
        "total_loss_qty": sum(abs(r["variance"]) for r in loss),
        "total_excess_qty": sum(r["variance"] for r in excess),
    }


def get_pilferage_report(conn, week_key: Optional[str] = None) -> dict[str, Any]:
    """
    Variance of every fact in the week against its expected closing stock,
    joined to the previous week's count for the same (store, product).

    Rows come back sorted by signed variance, biggest loss first.
    """
    current_week = week_key or week_start()
    previous_week = shift_week(current_week, -1)

    prev_lookup = {
        (str(r["store_id"]), str(r["product_id"])): r for r in facts_for_week(conn, previous_week)
    }

    rows = [
        _report_row(curr, prev_lookup.get((str(curr["store_id"]), str(curr["product_id"]))))
        for curr in facts_for_week(conn, current_week)
    ]
    rows.sort(key=lambda r: r["variance"])

    return {
        "week_start": current_week,
        "prev_week": previous_week,
        "data": rows,
        "summary": summarize(rows),
    }


def report_frame(report: dict[str, Any]) -> pd.DataFrame:
    return pd.DataFrame(report["data"], columns=REPORT_COLUMNS)
