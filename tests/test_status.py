"""
Tests — submission status per active store for a week.

@file tests/test_status.py
"""

from stockcount.services import status as status_module
from stockcount.services.reference import deactivate_store, upsert_store
from stockcount.services.status import get_submission_status, missing_stores
from stockcount.services.submissions import record_submission

WEEK = "2026-10-11"
ITEMS = [{"product_id": "P001", "product_name": "Rice 5kg Bag", "opening_stock": 5, "physical_count": 5}]


class TestGetSubmissionStatus:

    def test_three_of_eight_submitted(self, seeded_conn):
        for store_id in ("S001", "S004", "S007"):
            record_submission(seeded_conn, WEEK, store_id, store_id, f"mgr-{store_id}", ITEMS)

        status = get_submission_status(seeded_conn, WEEK)
        assert len(status) == 8

        done = [s for s in status if s["submitted"]]
        pending = [s for s in status if not s["submitted"]]
        assert {s["store_id"] for s in done} == {"S001", "S004", "S007"}
        assert len(pending) == 5
        for s in pending:
            assert s["submitted_by"] is None
            assert s["submitted_at"] is None
        for s in done:
            assert s["submitted_by"] == f"mgr-{s['store_id']}"
            assert s["submitted_at"]

    def test_entry_shape(self, seeded_conn):
        entry = get_submission_status(seeded_conn, WEEK)[0]
        assert set(entry) == {
            "store_id",
            "store_name",
            "manager_name",
            "manager_email",
            "submitted",
            "submitted_by",
            "submitted_at",
        }

    def test_ordered_by_store_name(self, seeded_conn):
        names = [s["store_name"] for s in get_submission_status(seeded_conn, WEEK)]
        assert names == sorted(names)

    def test_deactivated_store_never_appears(self, seeded_conn):
        upsert_store(seeded_conn, store_id="S009", store_name="Closed Store")
        record_submission(seeded_conn, WEEK, "S009", "Closed Store", "x", ITEMS)
        deactivate_store(seeded_conn, "S009")

        status = get_submission_status(seeded_conn, WEEK)
        assert "S009" not in {s["store_id"] for s in status}
        assert len(status) == 8

    def test_other_weeks_do_not_count(self, seeded_conn):
        record_submission(seeded_conn, "2026-10-04", "S001", "Downtown Store", "ann", ITEMS)
        assert not any(s["submitted"] for s in get_submission_status(seeded_conn, WEEK))

    def test_defaults_to_current_week(self, seeded_conn, monkeypatch):
        monkeypatch.setattr(status_module, "week_start", lambda ts=None: WEEK)
        record_submission(seeded_conn, WEEK, "S001", "Downtown Store", "ann", ITEMS)
        status = get_submission_status(seeded_conn)
        assert sum(1 for s in status if s["submitted"]) == 1

    def test_no_stores(self, conn):
        assert get_submission_status(conn, WEEK) == []


class TestMissingStores:

    def test_filters_unsubmitted(self):
        status = [
            {"store_id": "A", "submitted": True},
            {"store_id": "B", "submitted": False},
        ]
        assert [s["store_id"] for s in missing_stores(status)] == ["B"]
