"""Tests for the Postgres code paths, using a stand-in psycopg2 connection.

No Postgres server is needed: the fake records every statement the adapter sends
and answers with canned rows.
"""

from __future__ import annotations

import sys
import types
from unittest.mock import patch

import pytest

from wealth_tracker.db import PGConnection, connect, init_db, insert_returning_id, table_columns
from wealth_tracker.store import PortfolioStore

DSN = "postgresql://u:p@localhost:5432/wealth"


class FakeCursor:
    def __init__(self, raw: "FakeRawConnection"):
        self._raw = raw
        self._one = None
        self._all: list = []
        self.rowcount = -1
        self.closed = False

    def execute(self, sql, params=()):
        self._raw.executed.append((sql, tuple(params)))
        self._one, self._all, self.rowcount = self._raw.respond(sql, tuple(params))

    def fetchone(self):
        return self._one

    def fetchall(self):
        return self._all

    def close(self):
        self.closed = True


class FakeRawConnection:
    def __init__(self, respond=None):
        self.executed: list[tuple[str, tuple]] = []
        self.respond = respond or (lambda sql, params: (None, [], 0))
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


@pytest.fixture
def fake_psycopg2():
    """Install a stand-in psycopg2 module whose connect() hands out FakeRawConnection."""
    extras = types.ModuleType("psycopg2.extras")
    extras.RealDictCursor = object()
    mod = types.ModuleType("psycopg2")
    mod.extras = extras
    mod.connections = []
    mod.respond = None

    def _connect(dsn, cursor_factory=None):
        raw = FakeRawConnection(mod.respond)
        raw.dsn = dsn
        raw.cursor_factory = cursor_factory
        mod.connections.append(raw)
        return raw

    mod.connect = _connect
    with patch.dict(sys.modules, {"psycopg2": mod, "psycopg2.extras": extras}):
        yield mod


class TestPGConnection:
    def test_placeholders_are_converted(self):
        raw = FakeRawConnection()
        PGConnection(raw).execute("SELECT * FROM t WHERE a=? AND b='?'", (1,))
        assert raw.executed == [("SELECT * FROM t WHERE a=%s AND b='?'", (1,))]

    def test_missing_params_become_empty_tuple(self):
        raw = FakeRawConnection()
        PGConnection(raw).execute("SELECT 1")
        assert raw.executed == [("SELECT 1", ())]

    def test_rowcount(self):
        raw = FakeRawConnection(lambda sql, params: (None, [], 3))
        assert PGConnection(raw).execute("DELETE FROM t WHERE id=?", (1,)).rowcount == 3

    def test_rowcount_none_is_zero(self):
        raw = FakeRawConnection(lambda sql, params: (None, [], None))
        assert PGConnection(raw).execute("DELETE FROM t").rowcount == 0

    def test_insert_returning_id(self):
        raw = FakeRawConnection(lambda sql, params: ({"id": 7}, [], 1))
        new_id = insert_returning_id(PGConnection(raw), "INSERT INTO platforms (name) VALUES (?);", ("Groww",))
        assert new_id == 7
        assert raw.executed == [("INSERT INTO platforms (name) VALUES (%s) RETURNING id", ("Groww",))]

    def test_table_columns_reads_information_schema(self):
        rows = [{"column_name": "id"}, {"column_name": "scheme_name"}]
        raw = FakeRawConnection(lambda sql, params: (None, rows, 2))
        assert table_columns(PGConnection(raw), "transactions") == ["id", "scheme_name"]
        sql, params = raw.executed[0]
        assert "information_schema.columns" in sql
        assert params == ("transactions",)


class TestConnectPostgres:
    def test_commits_and_closes_on_success(self, fake_psycopg2):
        with connect(DSN) as conn:
            assert conn.dialect == "postgres"
            conn.execute("SELECT 1")
        raw = fake_psycopg2.connections[0]
        assert raw.dsn == DSN
        assert raw.cursor_factory is fake_psycopg2.extras.RealDictCursor
        assert raw.committed and raw.closed
        assert not raw.rolled_back

    def test_rolls_back_and_closes_on_error(self, fake_psycopg2):
        with pytest.raises(ValueError):
            with connect(DSN):
                raise ValueError("boom")
        raw = fake_psycopg2.connections[0]
        assert raw.rolled_back and raw.closed
        assert not raw.committed

    def test_missing_driver(self):
        with patch.dict(sys.modules, {"psycopg2": None}):
            with pytest.raises(RuntimeError, match="psycopg2 is not installed"):
                with connect(DSN):
                    pass


class TestInitDbPostgres:
    @staticmethod
    def _respond(columns):
        def respond(sql, params):
            if "information_schema.columns" in sql:
                return None, [{"column_name": c} for c in columns], len(columns)
            if "COUNT(*)" in sql:
                return {"n": 0}, [], 1
            return None, [], 0

        return respond

    def test_creates_schema_migrates_and_seeds(self, fake_psycopg2):
        fake_psycopg2.respond = self._respond(["id", "scheme_name"])
        init_db(DSN, seed_asset_types=("Stocks",))
        sqls = [sql for sql, _ in fake_psycopg2.connections[0].executed]

        assert any("BIGSERIAL PRIMARY KEY" in s for s in sqls)
        assert not any("PRAGMA" in s or "AUTOINCREMENT" in s for s in sqls)
        assert "ALTER TABLE transactions ADD COLUMN platform TEXT" in sqls
        assert "ALTER TABLE transactions ADD COLUMN account TEXT" in sqls
        assert "INSERT INTO asset_types (name, created_at) VALUES (%s, %s)" in sqls
        assert fake_psycopg2.connections[0].committed

    def test_migrated_database_gets_no_alter(self, fake_psycopg2):
        fake_psycopg2.respond = self._respond(["id", "platform", "account"])
        init_db(DSN)
        sqls = [sql for sql, _ in fake_psycopg2.connections[0].executed]
        assert not any(s.startswith("ALTER TABLE") for s in sqls)


def test_store_create_name_uses_returning(fake_psycopg2):
    fake_psycopg2.respond = lambda sql, params: ({"id": 11}, [], 1)
    store = PortfolioStore(DSN)
    assert store.dialect == "postgres"
    assert store.create_name("accounts", "Joint") == {"id": 11, "name": "Joint"}
    sql, params = fake_psycopg2.connections[0].executed[0]
    assert sql == "INSERT INTO accounts (name, created_at) VALUES (%s, %s) RETURNING id"
    assert params[0] == "Joint"
