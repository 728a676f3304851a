"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest

# Configuration is read at import time, so set it before anything imports core.config
_TEST_DIR = Path(tempfile.mkdtemp(prefix="salon-schedule-tests-"))
os.environ["SCHEDULE_DB_PATH"] = str(_TEST_DIR / "test.db")
os.environ["SCHEDULE_API_KEY"] = "test-api-key"
os.environ["API_REQUEST_LOGGING"] = "false"
os.environ["PREFERENCES_BACKEND"] = "memory"

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import DAY_NAMES  # noqa: E402

API_KEY = "test-api-key"


class FakeScheduleStore:
    """In-memory ScheduleStore that records every call."""

    def __init__(self, entries=None, requests=None, fail_on_create=None):
        self.entries: list[dict] = [dict(e) for e in (entries or [])]
        self.requests: list[dict] = [dict(r) for r in (requests or [])]
        self.calls: list[tuple] = []
        # 1-based index of the create_entry call that raises
        self.fail_on_create = fail_on_create
        self._create_count = 0
        self._next_id = 1

    def _id(self, prefix):
        value = f"{prefix}-{self._next_id}"
        self._next_id += 1
        return value

    async def fetch_entries_for_date(self, date_str):
        self.calls.append(("fetch_entries_for_date", date_str))
        return [dict(e) for e in self.entries if e["date"] == date_str]

    async def get_entry(self, entry_id):
        self.calls.append(("get_entry", entry_id))
        for e in self.entries:
            if e["id"] == entry_id:
                return dict(e)
        return None

    async def create_entry(self, candidate):
        self.calls.append(("create_entry", candidate["date"]))
        self._create_count += 1
        if self.fail_on_create == self._create_count:
            raise ConnectionError("network down")
        entry = {
            "id": self._id("schedule"),
            "status": "scheduled",
            "notes": None,
            "created_at": "2024-01-01T00:00:00+00:00",
            "updated_at": "2024-01-01T00:00:00+00:00",
            **candidate,
        }
        self.entries.append(entry)
        return dict(entry)

    async def update_entry(self, entry_id, fields):
        self.calls.append(("update_entry", entry_id))
        for e in self.entries:
            if e["id"] == entry_id:
                e.update(fields)
                return dict(e)
        return None

    async def delete_entry(self, entry_id):
        self.calls.append(("delete_entry", entry_id))
        before = len(self.entries)
        self.entries = [e for e in self.entries if e["id"] != entry_id]
        return len(self.entries) < before

    async def create_request(self, request):
        record = {
            "id": self._id("request"),
            "status": "pending",
            "requested_at": "2024-01-01T00:00:00+00:00",
            "approved_at": None,
            "staff_name": None,
            "notes": None,
            **request,
        }
        self.requests.append(record)
        return dict(record)

    async def list_requests(self, status=None):
        return [dict(r) for r in self.requests if status is None or r["status"] == status]

    async def get_request(self, request_id):
        for r in self.requests:
            if r["id"] == request_id:
                return dict(r)
        return None

    async def update_request(self, request_id, fields):
        for r in self.requests:
            if r["id"] == request_id:
                r.update(fields)
                return dict(r)
        return None

    def call_names(self):
        return [name for name, _ in self.calls]


def make_entry(entry_id, staff_id, date_str, start_time, end_time, notes=None):
    return {
        "id": entry_id,
        "staff_id": staff_id,
        "date": date_str,
        "start_time": start_time,
        "end_time": end_time,
        "status": "scheduled",
        "notes": notes,
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
    }


def make_template(working_days, start_time="09:00", end_time="18:00"):
    return {
        day: {"is_working": day in working_days, "start_time": start_time, "end_time": end_time}
        for day in DAY_NAMES
    }


@pytest.fixture
def fake_store():
    return FakeScheduleStore()


@pytest.fixture
def weekday_template():
    """Monday-Friday 09:00-18:00."""
    return make_template({"monday", "tuesday", "wednesday", "thursday", "friday"})


@pytest.fixture
def today():
    """A fixed Wednesday; its week starts Sunday 2024-06-09."""
    return date(2024, 6, 12)


@pytest.fixture
def next_week_start():
    """Sunday after the real current week, for tests that go through the API."""
    d = date.today()
    this_sunday = d - timedelta(days=(d.weekday() + 1) % 7)
    return this_sunday + timedelta(weeks=1)


@pytest.fixture
def sample_entry():
    """Staff 5, 2024-06-10 09:00-13:00."""
    return make_entry("schedule-existing", 5, "2024-06-10", "09:00", "13:00")
