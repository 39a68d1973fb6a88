"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from typing import Optional

from models.dataset import ParsedDataset
from parsers.csv_parser import SAMPLE_COLUMNS, SAMPLE_ROWS
from services.events import EventBus
from services.storage import create_database, TrackerDatabase
from services.tracker_service import TrackerService
from tests.factories import FakeClock

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Unlike a canned response, it reads and writes the rows of its table,
    so upserts are visible to later selects.
    """

    def __init__(self, client: "MockSupabaseClient", rows: list, action: str, payload=None):
        self._client = client
        self._rows = rows
        self._action = action
        self._payload = payload
        self._filters = []
        self._order = None
        self._range = None
        self._limit = None
        self._count = False

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self._filters.append(lambda row: row.get(column) != value)
        return self

    def like(self, column, pattern):
        prefix = pattern.rstrip("%")
        self._filters.append(lambda row: str(row.get(column, "")).startswith(prefix))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matching(self) -> list:
        return [row for row in self._rows if all(f(row) for f in self._filters)]

    def execute(self) -> MockSupabaseResponse:
        self._client.calls.append(self._action)
        if self._client.error is not None:
            raise self._client.error

        if self._action == "upsert":
            for row in self._rows:
                if row["key"] == self._payload["key"]:
                    row.update(self._payload)
                    break
            else:
                self._rows.append(dict(self._payload))
            return MockSupabaseResponse(data=[self._payload])

        if self._action == "delete":
            doomed = self._matching()
            self._rows[:] = [row for row in self._rows if row not in doomed]
            return MockSupabaseResponse(data=doomed)

        rows = self._matching()
        total = len(rows)
        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda row: row.get(column), reverse=desc)
        if self._range:
            start, end = self._range
            rows = rows[start:end + 1]
        if self._limit is not None:
            rows = rows[:self._limit]
        return MockSupabaseResponse(data=[dict(row) for row in rows], count=total)


class MockSupabaseTable:
    """Mock Supabase table backed by a list of rows."""

    def __init__(self, client: "MockSupabaseClient", rows: list):
        self._client = client
        self._rows = rows

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._rows, "select")

    def upsert(self, data, on_conflict=None):
        return MockSupabaseQuery(self._client, self._rows, "upsert", payload=data)

    def delete(self):
        return MockSupabaseQuery(self._client, self._rows, "delete")


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.calls = []
        self.error: Optional[Exception] = None

    def set_table_data(self, table_name: str, data: list):
        """Configure rows for a table."""
        self._tables[table_name] = [dict(row) for row in data]

    def table_data(self, table_name: str) -> list:
        return self._tables.get(table_name, [])

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(self, self._tables.setdefault(name, []))


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached services so every test starts from empty stores."""
    import services.storage as storage_module
    import services.tracker_service as tracker_module
    import services.settings_service as settings_module

    modules = [
        (storage_module, "_database"),
        (tracker_module, "_tracker_service"),
        (settings_module, "_settings_service"),
    ]
    for module, attr in modules:
        setattr(module, attr, None)
    yield
    for module, attr in modules:
        setattr(module, attr, None)


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """Stateful mock Supabase client."""
    return MockSupabaseClient()


@pytest.fixture
def database() -> TrackerDatabase:
    """Fresh in-memory stores."""
    return create_database(backend="memory", namespace="test-db")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def tracker(database, clock, events) -> TrackerService:
    """Tracker over in-memory stores with a deterministic clock."""
    return TrackerService(database=database, events=events, clock=clock)


@pytest.fixture
def sample_dataset() -> ParsedDataset:
    """The built-in 7-order sample (ids 1001-1007)."""
    rows = [dict(zip(SAMPLE_COLUMNS, values)) for values in SAMPLE_ROWS]
    return ParsedDataset(rows=rows, columns=list(SAMPLE_COLUMNS))


@pytest.fixture
def test_client():
    """
    Create FastAPI test client over fresh in-memory stores.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/snapshots")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
