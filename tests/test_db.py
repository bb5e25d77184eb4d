"""Tests for dialect detection, placeholder translation and schema DDL."""

import sqlite3
from contextlib import contextmanager

import pytest

from store_ratings import db
from store_ratings.db import detect_dialect, is_integrity_error, qmark_to_pct
from store_ratings.schema import get_schema_sql, schema_statements


class _RecordingConn:
    def __init__(self):
        self.statements = []

    def execute(self, sql, params=None):
        self.statements.append(sql)
        return self


class TestDetectDialect:
    @pytest.mark.parametrize("dsn", ["postgresql://u:p@localhost/x", "postgres://db/app"])
    def test_postgres(self, dsn):
        assert detect_dialect(dsn) == "postgres"

    @pytest.mark.parametrize("dsn", ["", "./store_ratings.sqlite", "sqlite:///tmp/x.sqlite"])
    def test_sqlite(self, dsn):
        assert detect_dialect(dsn) == "sqlite"


class TestQmarkToPct:
    def test_placeholders_replaced(self):
        sql = "SELECT * FROM users WHERE email=? AND role=?"
        assert qmark_to_pct(sql) == "SELECT * FROM users WHERE email=%s AND role=%s"

    def test_quoted_literals_untouched(self):
        sql = "SELECT 'why?', \"col?\" FROM t WHERE a=? AND b='it''s?'"
        assert qmark_to_pct(sql) == "SELECT 'why?', \"col?\" FROM t WHERE a=%s AND b='it''s?'"


class TestPostgresSchema:
    def test_statements_start_with_create(self):
        stmts = schema_statements("postgres")
        # users, idx_users_role, stores, ratings, idx_ratings_store
        assert len(stmts) == 5
        for stmt in stmts:
            assert stmt.upper().startswith("CREATE "), stmt
            assert "--" not in stmt
            assert "PRAGMA" not in stmt.upper()

    def test_autoincrement_rewritten(self):
        ddl = get_schema_sql("postgres")
        assert "AUTOINCREMENT" not in ddl.upper()
        assert ddl.count("BIGSERIAL PRIMARY KEY") == 3

    def test_sqlite_schema_unchanged(self):
        assert "AUTOINCREMENT" in get_schema_sql("sqlite")

    def test_init_db_sends_only_create_statements(self, monkeypatch):
        conn = _RecordingConn()

        @contextmanager
        def _fake_connect(dsn):
            yield conn

        monkeypatch.setattr(db, "connect", _fake_connect)
        db.init_db("postgresql://u:p@localhost/x")

        assert conn.statements == schema_statements("postgres")
        assert all(s.upper().startswith("CREATE ") for s in conn.statements)


class TestIntegrityError:
    def test_sqlite(self):
        assert is_integrity_error(sqlite3.IntegrityError("UNIQUE constraint failed"))

    def test_postgres_unique_violation(self):
        class _PgError(Exception):
            pgcode = "23505"

        assert is_integrity_error(_PgError())

    def test_other_errors(self):
        class _PgError(Exception):
            pgcode = "42601"

        assert not is_integrity_error(_PgError())
        assert not is_integrity_error(ValueError("nope"))
