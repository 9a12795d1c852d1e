from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Union

import streamlit as st

from stockcount.schema import SCHEMA_SQL

logger = logging.getLogger("stockcount")

# Serializes every statement and unit of work on shared connections.
_db_lock = threading.RLock()


def _connect(db_path: Union[Path, str]) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    if str(db_path) != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL;")
    return conn


def open_db(db_path: Union[Path, str]) -> sqlite3.Connection:
    """Open the store once at process start and make sure the schema exists."""
    conn = _connect(db_path)
    ensure_schema(conn)
    logger.info("Database ready at %s", db_path)
    return conn


def close_db(conn: sqlite3.Connection) -> None:
    conn.close()


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return open_db(db_path)


def _column_exists(conn: sqlite3.Connection, table: str, column: str) -> bool:
    rows = q(conn, f"PRAGMA table_info({table});")
    cols = [r["name"] for r in rows]
    return column in cols


def ensure_schema(conn: sqlite3.Connection) -> None:
    with _db_lock:
        # Create base schema (for new installs)
        conn.executescript(SCHEMA_SQL)

        # ---- migrations for existing installs ----
        if not _column_exists(conn, "products", "unit"):
            conn.execute("ALTER TABLE products ADD COLUMN unit TEXT NOT NULL DEFAULT 'Pcs';")

        if not _column_exists(conn, "submission_log", "item_count"):
            conn.execute("ALTER TABLE submission_log ADD COLUMN item_count INTEGER NOT NULL DEFAULT 0;")

        conn.commit()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    All-or-nothing unit of work. Statements executed inside the block are
    committed together, or rolled back together if anything raises.

    The Streamlit app shares one connection across session threads, so the
    whole block holds the module lock: no other thread can read the
    uncommitted rows or commit them on this block's behalf.
    """
    with _db_lock:
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    with _db_lock:
        cur = conn.execute(sql, tuple(params))
        rows = cur.fetchall()
        cur.close()
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    with _db_lock:
        cur = conn.execute(sql, tuple(params))
        conn.commit()
        last = cur.lastrowid
        cur.close()
    return int(last or 0)


def rowcount(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    with _db_lock:
        cur = conn.execute(sql, tuple(params))
        conn.commit()
        n = cur.rowcount
        cur.close()
    return int(n)
