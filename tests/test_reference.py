"""
Tests — stores/products reference data: upsert by external id, ordering,
soft delete.

@file tests/test_reference.py
"""

import pytest

from stockcount.db import q
from stockcount.services.reference import (
    deactivate_product,
    deactivate_store,
    get_product,
    get_store,
    list_active_products,
    list_active_stores,
    upsert_product,
    upsert_store,
)


class TestStores:

    def test_list_is_ordered_by_name(self, conn):
        upsert_store(conn, store_id="B", store_name="Zeta")
        upsert_store(conn, store_id="A", store_name="Alpha")
        assert [s["store_name"] for s in list_active_stores(conn)] == ["Alpha", "Zeta"]

    def test_upsert_updates_in_place(self, conn):
        upsert_store(conn, store_id="S1", store_name="Old", manager_name="Ann")
        upsert_store(conn, store_id="S1", store_name="New", manager_email="ann@example.com")

        rows = q(conn, "SELECT * FROM stores WHERE store_id='S1'")
        assert len(rows) == 1
        assert rows[0]["store_name"] == "New"
        assert rows[0]["manager_name"] is None
        assert rows[0]["manager_email"] == "ann@example.com"

    def test_deactivate_is_soft(self, conn):
        upsert_store(conn, store_id="S1", store_name="One")
        assert deactivate_store(conn, "S1") is True

        assert list_active_stores(conn) == []
        store = get_store(conn, "S1")
        assert store is not None
        assert store["is_active"] == 0

    def test_deactivate_unknown_returns_false(self, conn):
        assert deactivate_store(conn, "NOPE") is False

    def test_upsert_reactivates(self, conn):
        upsert_store(conn, store_id="S1", store_name="One")
        deactivate_store(conn, "S1")
        upsert_store(conn, store_id="S1", store_name="One again")
        assert [s["store_id"] for s in list_active_stores(conn)] == ["S1"]

    @pytest.mark.parametrize("store_id,name", [("", "Name"), ("  ", "Name"), ("S1", ""), (None, "Name")])
    def test_missing_identity_rejected(self, conn, store_id, name):
        with pytest.raises(ValueError):
            upsert_store(conn, store_id=store_id, store_name=name)
        assert list_active_stores(conn) == []


class TestProducts:

    def test_list_is_ordered_by_category_then_name(self, conn):
        upsert_product(conn, product_id="P2", product_name="Soap", category="Household")
        upsert_product(conn, product_id="P1", product_name="Sugar", category="Grocery")
        upsert_product(conn, product_id="P3", product_name="Rice", category="Grocery")
        assert [p["product_id"] for p in list_active_products(conn)] == ["P3", "P1", "P2"]

    def test_default_unit(self, conn):
        upsert_product(conn, product_id="P1", product_name="Bread", unit=None)
        assert get_product(conn, "P1")["unit"] == "Pcs"

    def test_deactivate(self, conn):
        upsert_product(conn, product_id="P1", product_name="Bread")
        assert deactivate_product(conn, "P1") is True
        assert list_active_products(conn) == []
        assert get_product(conn, "P1")["is_active"] == 0

    def test_get_unknown_is_none(self, conn):
        assert get_product(conn, "missing") is None
