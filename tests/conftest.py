"""
Shared test fixtures.

Provides a chainable mock Supabase client, a small product vocabulary and
FastAPI test clients wired to both.
"""

import os
import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings need these before any project import
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from typing import Generator

from services.suggestion_service import SuggestionIndex, SuggestionRanker
from services.import_record_service import ImportRecordService

VOCABULARY = [
    "Stainless Steel Pipe",
    "Steel Rod",
    "Steel Wire Mesh",
    "Copper Cathode",
    "Aluminium Ingot",
    "PVC Resin",
    "Crème Fraîche Powder",
]


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    eq() filters rows and update() is applied to the filtered rows, so update
    paths behave like the real thing. Every call lands in the client's call
    log for assertions.
    """

    def __init__(self, rows: list, count: int, calls: list):
        self._rows = rows
        self._count = count
        self._calls = calls
        self._update = None
        self._is_single = False
        self._limit = None
        self._range = None

    def _log(self, method: str, *args, **kwargs):
        self._calls.append((method, args, kwargs))
        return self

    def select(self, *args, **kwargs):
        return self._log("select", *args, **kwargs)

    def update(self, data: dict):
        self._update = data
        return self._log("update", data)

    def eq(self, column, value):
        self._rows = [row for row in self._rows if row.get(column) == value]
        return self._log("eq", column, value)

    def or_(self, filters: str):
        return self._log("or_", filters)

    def ilike(self, column, pattern):
        return self._log("ilike", column, pattern)

    def gte(self, column, value):
        return self._log("gte", column, value)

    def lte(self, column, value):
        return self._log("lte", column, value)

    def is_(self, column, value):
        return self._log("is_", column, value)

    @property
    def not_(self):
        return self._log("not_")

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self._log("order", column, **kwargs)

    def range(self, start, end):
        self._range = (start, end)
        return self._log("range", start, end)

    def limit(self, count):
        self._limit = count
        return self._log("limit", count)

    def execute(self) -> MockSupabaseResponse:
        rows = self._rows
        if self._update is not None:
            for row in rows:
                row.update(self._update)
            rows = [dict(row) for row in rows]

        total = self._count if self._count is not None else len(rows)

        if self._range is not None:
            start, end = self._range
            rows = rows[start:end + 1]
        if self._limit is not None:
            rows = rows[:self._limit]

        if self._is_single:
            data = rows[0] if rows else None
            return MockSupabaseResponse(data=data, count=1 if data else 0)

        return MockSupabaseResponse(data=[dict(row) for row in rows], count=total)


class MockSupabaseTable:
    """Mock Supabase table over a shared list of rows."""

    def __init__(self, rows: list, count: int, calls: list):
        self._rows = rows
        self._count = count
        self._calls = calls

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(list(self._rows), self._count, self._calls)

    def select(self, *args, **kwargs):
        return self._query().select(*args, **kwargs)

    def update(self, data):
        return self._query().update(data)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.calls = []
        self.fail_with = None

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock rows for a table. Updates mutate these dicts."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        if self.fail_with is not None:
            raise self.fail_with
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(config["data"], config["count"], self.calls)

    def called(self, method: str) -> list:
        """Arguments of every call to one builder method."""
        return [args for name, args, _ in self.calls if name == method]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data(settings.imports_table, [
                {"system_id": 42, "unique_product_name": None, ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Any code using get_supabase_client() gets the mock.
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.import_record_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def ranker() -> SuggestionRanker:
    """Ranker over the test vocabulary."""
    return SuggestionRanker(SuggestionIndex.from_names(VOCABULARY))


@pytest.fixture
def record_service(mock_db, ranker) -> ImportRecordService:
    """ImportRecordService on the mock database and test vocabulary."""
    return ImportRecordService(ranker=ranker)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db, ranker, record_service):
    """
    Create FastAPI test client with mocked database and vocabulary.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data(settings.imports_table, [...])
            response = test_client_with_mock_db.get("/api/data")
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("routes.imports.get_import_record_service", return_value=record_service):
        with patch("routes.suggestions.get_suggestion_service", return_value=ranker):
            yield TestClient(app)
