"""
Configuración de pytest y fixtures compartidas.
"""

import os

# Settings exige credenciales; los tests nunca hablan con Supabase real
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest

from vitrina.compare import CompareStore, MemoryStorage
from vitrina.models import ListingPage, PropertyRecord, PropertySummary


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Query builder de PostgREST que registra cada llamada encadenada."""

    def __init__(self, table, rows, count=None, error=None):
        self.table = table
        self.rows = rows
        self.count = count
        self.error = error
        self.calls = []
        self.executions = 0

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self

    def select(self, *args, **kwargs):
        return self._record("select", *args, **kwargs)

    def eq(self, *args):
        return self._record("eq", *args)

    def gte(self, *args):
        return self._record("gte", *args)

    def lte(self, *args):
        return self._record("lte", *args)

    def ilike(self, *args):
        return self._record("ilike", *args)

    def or_(self, *args):
        return self._record("or_", *args)

    def contains(self, *args):
        return self._record("contains", *args)

    def in_(self, *args):
        return self._record("in_", *args)

    def order(self, *args, **kwargs):
        return self._record("order", *args, **kwargs)

    def range(self, *args):
        return self._record("range", *args)

    def limit(self, *args):
        return self._record("limit", *args)

    def called(self, name):
        return [args for n, args, _ in self.calls if n == name]

    def execute(self):
        self.executions += 1
        if self.error is not None:
            raise self.error
        return FakeResponse(self.rows, self.count)


class FakeSupabase:
    """Sustituto de SupabaseClient: devuelve siempre las filas configuradas."""

    def __init__(self, rows=None, count=None, error=None):
        self.rows = rows or []
        self.count = count
        self.error = error
        self.queries = []

    def table(self, name):
        query = FakeQuery(name, self.rows, self.count, self.error)
        self.queries.append(query)
        return query

    @property
    def last_query(self):
        return self.queries[-1]


def make_summary(property_id, **fields):
    fields.setdefault("title", f"Property {property_id}")
    return PropertySummary(id=property_id, **fields)


def make_record(property_id, **fields):
    fields.setdefault("title", f"Property {property_id}")
    fields.setdefault("status", "published")
    return PropertyRecord(id=property_id, **fields)


def make_page(ids, page=1, limit=3, total=None):
    items = [make_summary(i) for i in ids]
    return ListingPage(
        items=items,
        page=page,
        limit=limit,
        total=total if total is not None else len(items),
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return CompareStore(max_items=2, storage=storage)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()
