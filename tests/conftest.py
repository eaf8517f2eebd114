"""
Shared test fixtures.

Provides an in-memory Supabase mock, a default run configuration and
the FastAPI test client.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest

from models.replenishment import ReplenishmentConfig


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

    Filters and sort order are recorded but not applied: tests seed only
    the rows a real query would return. range() slices the seeded rows.
    """

    def __init__(self, data: list = None, count: int = None, table_name: str = None):
        self._data = data or []
        self._count = count
        self.table_name = table_name
        self.filters = []
        self.order_by = None
        self.page = None

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column, **kwargs):
        self.order_by = column
        return self

    def range(self, start, end):
        self.page = (start, end)
        self._data = self._data[start:end + 1]
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, name: str, data: list = None, count: int = None, queries: list = None):
        self._name = name
        self._data = data or []
        self._count = count
        self._queries = queries if queries is not None else []

    def select(self, *args, **kwargs):
        query = MockSupabaseQuery(self._data.copy(), self._count, table_name=self._name)
        self._queries.append(query)
        return query


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.requested_tables = []
        self.queries = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        self.requested_tables.append(name)
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(name, config["data"], config["count"], self.queries)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("variations", [
                {"id": "var-1", "sku": "TEST", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def default_config() -> ReplenishmentConfig:
    """Run configuration with the standard thresholds (0/7/14/30) and 45 supply days."""
    return ReplenishmentConfig(
        supply_days=45,
        safety_days=7,
        urgent_days=0,
        high_days=7,
        medium_days=14,
        low_days=30,
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/reorder-suggestions")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
