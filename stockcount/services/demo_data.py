from __future__ import annotations

import logging
import random
from typing import Optional

from stockcount.db import ensure_schema, q, transaction
from stockcount.services.submissions import record_submission
from stockcount.weeks import shift_week, week_start

logger = logging.getLogger("stockcount")

SAMPLE_STORES = [
    ("S001", "Downtown Store", "John Smith"),
    ("S002", "Mall Outlet", "Sarah Johnson"),
    ("S003", "Airport Kiosk", "Mike Brown"),
    ("S004", "Highway Store", "Emily Davis"),
    ("S005", "Central Market", "David Wilson"),
    ("S006", "Suburb Branch", "Lisa Anderson"),
    ("S007", "Beach Store", "Tom Garcia"),
    ("S008", "University Shop", "Anna Martinez"),
]

SAMPLE_PRODUCTS = [
    ("P001", "Rice 5kg Bag", "Grocery", "Bags"),
    ("P002", "Cooking Oil 1L", "Grocery", "Bottles"),
    ("P003", "Sugar 1kg", "Grocery", "Packs"),
    ("P004", "Milk 500ml", "Dairy", "Packets"),
    ("P005", "Bread Loaf", "Bakery", "Pcs"),
    ("P006", "Eggs (Dozen)", "Dairy", "Dozens"),
    ("P007", "Detergent 500g", "Household", "Packs"),
    ("P008", "Soap Bar", "Household", "Pcs"),
    ("P009", "Bottled Water 1L", "Beverages", "Bottles"),
    ("P010", "Instant Noodles", "Grocery", "Packs"),
]


def seed_sample_data(conn) -> bool:
    """Insert the sample stores and products into an empty database."""
    ensure_schema(conn)
    n = q(conn, "SELECT COUNT(*) AS n FROM stores WHERE is_active=1")[0]["n"]
    if int(n) > 0:
        return False

    logger.info("Seeding sample data...")
    with transaction(conn):
        conn.executemany(
            """
            INSERT INTO stores (store_id, store_name, manager_name, manager_email, is_active)
            VALUES (?, ?, ?, '', 1)
            ON CONFLICT(store_id) DO UPDATE SET is_active=1
            """,
            SAMPLE_STORES,
        )
        conn.executemany(
            """
            INSERT INTO products (product_id, product_name, category, unit, is_active)
            VALUES (?, ?, ?, ?, 1)
            ON CONFLICT(product_id) DO UPDATE SET is_active=1
            """,
            SAMPLE_PRODUCTS,
        )
    logger.info("%d stores + %d products seeded", len(SAMPLE_STORES), len(SAMPLE_PRODUCTS))
    return True


def load_demo_counts(conn, *, week_key: Optional[str] = None, seed: int = 7) -> int:
    """
    Two weeks of counts for the first few sample stores, so the report has
    a previous week to compare against. Returns the number of facts written.
    """
    random.seed(seed)
    seed_sample_data(conn)

    current = week_key or week_start()
    previous = shift_week(current, -1)
    written = 0

    for store_id, store_name, manager in SAMPLE_STORES[:5]:
        for week in (previous, current):
            items = []
            for product_id, product_name, _, _ in SAMPLE_PRODUCTS:
                opening = random.randint(20, 80)
                received = random.randint(0, 40)
                sold = random.randint(0, opening + received)
                closing = opening + received - sold
                physical = max(0, closing + random.choice([-3, -1, 0, 0, 0, 1, 2]))
                items.append(
                    {
                        "product_id": product_id,
                        "product_name": product_name,
                        "opening_stock": opening,
                        "received": received,
                        "sold": sold,
                        "physical_count": physical,
                    }
                )
            written += record_submission(conn, week, store_id, store_name, manager, items)
    return written


def wipe_all(conn) -> None:
    # Keep schema, delete data.
    with transaction(conn):
        for t in ["submission_log", "stock_submissions", "products", "stores"]:
            conn.execute(f"DELETE FROM {t};")
