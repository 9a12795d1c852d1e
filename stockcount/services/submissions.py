from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional, Sequence

from stockcount.db import q, transaction
from stockcount.utils import iso_now, to_float
from stockcount.weeks import previous_week_start, week_start

logger = logging.getLogger("stockcount")


class SubmissionError(ValueError):
    """A submission request is missing required fields; nothing was written."""


@dataclass
class SubmissionFact:
    week_start_date: str
    store_id: str
    store_name: Optional[str]
    product_id: str
    product_name: Optional[str]
    opening_stock: float
    received: float
    sold: float
    closing_calculated: float
    physical_count: float
    variance: float
    submitted_by: Optional[str]
    submitted_at: str


def build_fact(
    item: Mapping[str, Any],
    *,
    week_key: str,
    store_id: str,
    store_name: Optional[str],
    submitted_by: Optional[str],
    submitted_at: str,
) -> SubmissionFact:
    opening = to_float(item.get("opening_stock"))
    received = to_float(item.get("received"))
    sold = to_float(item.get("sold"))
    physical = to_float(item.get("physical_count"))
    closing_calc = opening + received - sold

    return SubmissionFact(
        week_start_date=week_key,
        store_id=store_id,
        store_name=store_name,
        product_id=item.get("product_id"),
        product_name=item.get("product_name"),
        opening_stock=opening,
        received=received,
        sold=sold,
        closing_calculated=closing_calc,
        physical_count=physical,
        variance=physical - closing_calc,
        submitted_by=submitted_by,
        submitted_at=submitted_at,
    )


# ------------------------------------------------------------ fact store


def facts_for_week(conn, week_key: str, store_id: Optional[str] = None):
    if store_id is None:
        return q(
            conn,
            "SELECT * FROM stock_submissions WHERE week_start_date=? ORDER BY store_name, product_name",
            (week_key,),
        )
    return q(
        conn,
        "SELECT * FROM stock_submissions WHERE week_start_date=? AND store_id=? ORDER BY product_name",
        (week_key, store_id),
    )


def submitted_stores(conn, week_key: str):
    # SQLite takes bare columns from the row holding MAX(), so submitted_by
    # belongs to the latest fact for the store.
    return q(
        conn,
        """
        SELECT store_id, store_name, submitted_by, MAX(submitted_at) AS submitted_at
        FROM stock_submissions
        WHERE week_start_date=?
        GROUP BY store_id
        """,
        (week_key,),
    )


def upsert_fact(conn, fact: SubmissionFact) -> None:
    """Insert or overwrite one fact. Does not commit; the caller owns the transaction."""
    conn.execute(
        """
        INSERT INTO stock_submissions (
            week_start_date, store_id, store_name, product_id, product_name,
            opening_stock, received, sold, closing_calculated, physical_count, variance,
            submitted_by, submitted_at
        ) VALUES (
            :week_start_date, :store_id, :store_name, :product_id, :product_name,
            :opening_stock, :received, :sold, :closing_calculated, :physical_count, :variance,
            :submitted_by, :submitted_at
        )
        ON CONFLICT(week_start_date, store_id, product_id) DO UPDATE SET
          opening_stock=excluded.opening_stock,
          received=excluded.received,
          sold=excluded.sold,
          closing_calculated=excluded.closing_calculated,
          physical_count=excluded.physical_count,
          variance=excluded.variance,
          submitted_by=excluded.submitted_by,
          submitted_at=excluded.submitted_at
        """,
        asdict(fact),
    )


def log_submission(conn, week_key: str, store_id: str, submitted_by: Optional[str], item_count: int) -> None:
    """Append one audit row. Does not commit; the caller owns the transaction."""
    conn.execute(
        """
        INSERT INTO submission_log (week_start_date, store_id, submitted_by, submitted_at, item_count)
        VALUES (?, ?, ?, ?, ?)
        """,
        (week_key, store_id, submitted_by, iso_now(), int(item_count)),
    )


def submission_log(conn, week_key: Optional[str] = None):
    if week_key is None:
        return q(conn, "SELECT * FROM submission_log ORDER BY id DESC")
    return q(conn, "SELECT * FROM submission_log WHERE week_start_date=? ORDER BY id DESC", (week_key,))


def available_weeks(conn, limit: int = 52) -> list[str]:
    rows = q(
        conn,
        """
        SELECT DISTINCT week_start_date
        FROM stock_submissions
        ORDER BY week_start_date DESC
        LIMIT ?
        """,
        (int(limit),),
    )
    return [str(r["week_start_date"]) for r in rows]


def last_week_closing(conn, store_id: str, prev_week: Optional[str] = None) -> dict[str, dict]:
    """Last week's physical counts for one store, keyed by product_id (form pre-fill)."""
    prev_week = prev_week or previous_week_start()
    rows = q(
        conn,
        """
        SELECT product_id, physical_count
        FROM stock_submissions
        WHERE week_start_date=? AND store_id=?
        """,
        (prev_week, store_id),
    )
    return {str(r["product_id"]): {"physical_count": r["physical_count"]} for r in rows}


# -------------------------------------------------------------- recorder


def record_submission(
    conn,
    week_key: str,
    store_id: str,
    store_name: Optional[str],
    submitted_by: Optional[str],
    items: Sequence[Mapping[str, Any]],
) -> int:
    """
    Commit one store's weekly count sheet.

    Every item is upserted on (week, store, product) and one audit log row
    is appended, all in a single transaction: if any row fails (e.g. a
    missing product_id), nothing from this call is persisted.

    Store and product ids are not checked against reference data; the
    names passed in are stored as a point-in-time snapshot.
    """
    submitted_at = iso_now()
    count = 0
    with transaction(conn):
        for item in items:
            fact = build_fact(
                item,
                week_key=week_key,
                store_id=store_id,
                store_name=store_name,
                submitted_by=submitted_by,
                submitted_at=submitted_at,
            )
            upsert_fact(conn, fact)
            count += 1
        log_submission(conn, week_key, store_id, submitted_by, count)

    logger.info("Recorded %d item(s) for store %s, week %s (by %s)", count, store_id, week_key, submitted_by)
    return count


def submit(conn, payload: Mapping[str, Any], *, week_key: Optional[str] = None) -> int:
    """Validate a submission request and record it for the given (default: current) week."""
    missing = [k for k in ("store_id", "submitted_by") if not payload.get(k)]
    if payload.get("items") is None:
        missing.append("items")
    if missing:
        raise SubmissionError(f"Missing fields: {', '.join(missing)}")

    items = payload["items"]
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
        raise SubmissionError("items must be a list of line items.")

    return record_submission(
        conn,
        week_key or week_start(),
        str(payload["store_id"]),
        payload.get("store_name"),
        str(payload["submitted_by"]),
        items,
    )
