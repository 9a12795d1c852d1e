from __future__ import annotations

import logging
from typing import Optional

from stockcount.db import q, rowcount, x

logger = logging.getLogger("stockcount")


def _clean(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def _required(v: Optional[str], label: str) -> str:
    s = _clean(v)
    if not s:
        raise ValueError(f"{label} is required.")
    return s


# ---------------------------------------------------------------- stores


def list_active_stores(conn):
    return q(conn, "SELECT * FROM stores WHERE is_active=1 ORDER BY store_name")


def get_store(conn, store_id: str):
    rows = q(conn, "SELECT * FROM stores WHERE store_id=?", (store_id,))
    return rows[0] if rows else None


def upsert_store(
    conn,
    *,
    store_id: str,
    store_name: str,
    manager_name: Optional[str] = None,
    manager_email: Optional[str] = None,
) -> None:
    """
    Insert-or-replace keyed on the external store_id.
    Re-upserting a deactivated store brings it back as active.
    """
    store_id = _required(store_id, "Store ID")
    store_name = _required(store_name, "Store name")
    x(
        conn,
        """
        INSERT INTO stores (store_id, store_name, manager_name, manager_email, is_active)
        VALUES (?, ?, ?, ?, 1)
        ON CONFLICT(store_id) DO UPDATE SET
          store_name=excluded.store_name,
          manager_name=excluded.manager_name,
          manager_email=excluded.manager_email,
          is_active=1
        """,
        (store_id, store_name, _clean(manager_name), _clean(manager_email)),
    )
    logger.info("Store %s saved", store_id)


def deactivate_store(conn, store_id: str) -> bool:
    n = rowcount(conn, "UPDATE stores SET is_active=0 WHERE store_id=?", (store_id,))
    if n:
        logger.info("Store %s deactivated", store_id)
    return n > 0


# -------------------------------------------------------------- products


def list_active_products(conn):
    return q(conn, "SELECT * FROM products WHERE is_active=1 ORDER BY category, product_name")


def get_product(conn, product_id: str):
    rows = q(conn, "SELECT * FROM products WHERE product_id=?", (product_id,))
    return rows[0] if rows else None


def upsert_product(
    conn,
    *,
    product_id: str,
    product_name: str,
    category: Optional[str] = None,
    unit: Optional[str] = "Pcs",
) -> None:
    product_id = _required(product_id, "Product ID")
    product_name = _required(product_name, "Product name")
    x(
        conn,
        """
        INSERT INTO products (product_id, product_name, category, unit, is_active)
        VALUES (?, ?, ?, ?, 1)
        ON CONFLICT(product_id) DO UPDATE SET
          product_name=excluded.product_name,
          category=excluded.category,
          unit=excluded.unit,
          is_active=1
        """,
        (product_id, product_name, _clean(category), _clean(unit) or "Pcs"),
    )
    logger.info("Product %s saved", product_id)


def deactivate_product(conn, product_id: str) -> bool:
    n = rowcount(conn, "UPDATE products SET is_active=0 WHERE product_id=?", (product_id,))
    if n:
        logger.info("Product %s deactivated", product_id)
    return n > 0
