from contextlib import contextmanager

import psycopg
import pytest

from category_matcher.models.category import CategoryRecord, CategoryVector
from category_matcher.services import category_db, db
from category_matcher.services.catalog import CategoryStorageError
from category_matcher.services.category_db import PgCategoryStore, _to_vector_literal

DATABASE_URL = "postgresql://matcher@localhost/categories"


class FakeCursor:
    def __init__(self, rows=(), error=None):
        self.rows = list(rows)
        self.error = error
        self.calls = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        if self.error is not None:
            raise self.error
        self.calls.append((sql, params))

    def executemany(self, sql, params):
        if self.error is not None:
            raise self.error
        self.calls.append((sql, list(params)))

    def fetchall(self):
        return self.rows


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.commits = 0

    def cursor(self):
        return self._cursor

    def commit(self):
        self.commits += 1


def _use_connection(monkeypatch, conn):
    opened = []

    @contextmanager
    def fake_get_connection(url=None, *, with_vector=True):
        opened.append(url)
        yield conn

    monkeypatch.setattr(db, "get_connection", fake_get_connection)
    return opened


def test_vector_literal_uses_fixed_precision():
    assert _to_vector_literal([0.5, 1]) == "[0.500000000000,1.000000000000]"
    assert _to_vector_literal([]) == "[]"


def test_load_catalog_drops_blank_levels(monkeypatch):
    cursor = FakeCursor(rows=[("50002033", "식품", "음료", "탄산수", ""), ("9", "", "", "", "")])
    _use_connection(monkeypatch, FakeConnection(cursor))

    records = PgCategoryStore(DATABASE_URL).load_catalog()

    assert records == [CategoryRecord("50002033", ("식품", "음료", "탄산수"))]
    assert category_db.CATEGORY_TABLE in cursor.calls[0][0]


def test_load_vectors_skips_null_rows(monkeypatch):
    cursor = FakeCursor(rows=[(1, [0.6, 0.8]), (2, None)])
    _use_connection(monkeypatch, FakeConnection(cursor))

    assert PgCategoryStore(DATABASE_URL).load_vectors() == [CategoryVector("1", [0.6, 0.8])]


def test_save_vectors_upserts_in_one_commit(monkeypatch):
    cursor = FakeCursor()
    conn = FakeConnection(cursor)
    _use_connection(monkeypatch, conn)

    PgCategoryStore(DATABASE_URL).save_vectors(
        [CategoryVector("a", [1.0, 0.0]), CategoryVector("b", [0.0, 1.0])]
    )

    sql, payload = cursor.calls[0]
    assert "ON CONFLICT (cat_id)" in sql
    assert [row["id"] for row in payload] == ["a", "b"]
    assert payload[0]["vector"] == "[1.000000000000,0.000000000000]"
    assert conn.commits == 1


def test_save_nothing_does_not_connect(monkeypatch):
    opened = _use_connection(monkeypatch, FakeConnection(FakeCursor()))
    PgCategoryStore(DATABASE_URL).save_vectors([])
    assert opened == []


@pytest.mark.parametrize(
    "operation",
    [
        lambda store: store.load_catalog(),
        lambda store: store.load_vectors(),
        lambda store: store.save_vectors([CategoryVector("a", [1.0])]),
        lambda store: store.ensure_schema(4),
    ],
)
def test_database_errors_become_storage_errors(monkeypatch, operation):
    failure = psycopg.OperationalError("server closed the connection unexpectedly")
    _use_connection(monkeypatch, FakeConnection(FakeCursor(error=failure)))

    with pytest.raises(CategoryStorageError) as excinfo:
        operation(PgCategoryStore(DATABASE_URL))

    assert excinfo.value.__cause__ is failure
