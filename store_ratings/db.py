from __future__ import annotations

import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Sequence
from urllib.parse import urlparse

from store_ratings.schema import get_schema_sql, schema_statements


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    scheme = urlparse(s).scheme.lower()
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    return "sqlite"


# Quoted literals are matched first so a '?' inside them is left alone.
_PLACEHOLDER_RE = re.compile(r"""('(?:[^']|'')*'|"(?:[^"]|"")*")|\?""")


def qmark_to_pct(sql: str) -> str:
    """Convert SQLite qmark placeholders (?) to psycopg2 placeholders (%s)."""
    return _PLACEHOLDER_RE.sub(lambda m: m.group(1) or "%s", sql)


class PGConnection:
    """Makes a psycopg2 connection accept the sqlite3-style calls used in this codebase."""

    dialect = "postgres"

    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        cur = self._conn.cursor()
        cur.execute(qmark_to_pct(sql), tuple(params or ()))
        return cur

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


def is_integrity_error(exc: BaseException) -> bool:
    """True for unique/foreign-key violations from either engine."""
    if isinstance(exc, sqlite3.IntegrityError):
        return True
    # psycopg2.IntegrityError subclasses share the SQLSTATE class 23.
    return str(getattr(exc, "pgcode", "") or "").startswith("23")


@contextmanager
def connect(db_dsn: str) -> Iterator[Any]:
    """Open a connection, commit on success, roll back on error.

    - SQLite: sqlite3.Row rows, WAL journal, foreign keys on.
    - Postgres: psycopg2 with RealDictCursor so rows behave like dicts.
    """
    dsn = (db_dsn or "").strip()

    if detect_dialect(dsn) == "postgres":
        import psycopg2
        import psycopg2.extras

        conn: Any = PGConnection(psycopg2.connect(dsn, cursor_factory=psycopg2.extras.RealDictCursor))
    else:
        if dsn.lower().startswith("sqlite:///"):
            dsn = dsn[len("sqlite:///") :]
        Path(dsn).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(dsn, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA busy_timeout=5000;")  # 5s
        conn.execute("PRAGMA foreign_keys = ON;")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_dsn: str) -> None:
    """Create all tables (idempotent)."""
    dialect = detect_dialect(db_dsn)
    _debug(f"Initializing DB ({dialect}) at {db_dsn}")
    with connect(db_dsn) as conn:
        if dialect == "postgres":
            for stmt in schema_statements(dialect):
                conn.execute(stmt)
        else:
            conn.executescript(get_schema_sql(dialect))
