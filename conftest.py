"""
Root conftest for pytest

Shared fixtures available to all test modules: an in-memory store with the
schema applied, a seeded variant, test settings and a recording notifier.
"""

import pytest

from stockcount.config import load_settings
from stockcount.db import close_db, open_db
from stockcount.services.demo_data import seed_sample_data
from stockcount.services.notifications import Notifier


class RecordingNotifier(Notifier):
    """Collects every notification instead of sending it."""

    def __init__(self, fail=False):
        self.fail = fail
        self.reminders = []
        self.summaries = []
        self.reports = []

    def send_store_reminder(self, store, week_key):
        self.reminders.append((store["store_id"], week_key))
        return not self.fail

    def send_admin_status_summary(self, status, week_key):
        self.summaries.append((list(status), week_key))
        return not self.fail

    def send_pilferage_report(self, report):
        self.reports.append(report)
        return not self.fail


@pytest.fixture
def conn():
    """Fresh in-memory database with the schema applied."""
    c = open_db(":memory:")
    yield c
    close_db(c)


@pytest.fixture
def seeded_conn(conn):
    """In-memory database holding the 8 sample stores and 10 sample products."""
    seed_sample_data(conn)
    return conn


@pytest.fixture
def settings(tmp_path):
    return load_settings(
        {
            "STOCKCOUNT_DATA_DIR": str(tmp_path),
            "SMTP_USER": "bot@example.com",
            "SMTP_PASS": "secret",
            "ADMIN_EMAILS": "ops@example.com, owner@example.com",
        }
    )


@pytest.fixture
def fake_notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(fail=True)
