"""Database schema for Store Ratings.

Written for SQLite; the Postgres DDL is derived with a couple of substitutions.

Timestamps are ISO-8601 TEXT (UTC, with 'Z') so both engines store and sort
them the same way.
"""

from __future__ import annotations

import re


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Accounts. Every login (user, store owner, admin) is a row here.
-- Only password hashes are stored, JWTs keep auth stateless.
CREATE TABLE IF NOT EXISTS users (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    address TEXT,
    role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('user','store','admin')),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_users_role ON users (role);

-- Stores. Each one is owned by exactly one user with role='store'.
CREATE TABLE IF NOT EXISTS stores (
    store_id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_user_id INTEGER NOT NULL UNIQUE,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    address TEXT,
    created_at TEXT NOT NULL,
    FOREIGN KEY (owner_user_id) REFERENCES users(user_id)
);

-- Ratings. (user_id, store_id) is the upsert key: re-rating replaces.
CREATE TABLE IF NOT EXISTS ratings (
    rating_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    store_id INTEGER NOT NULL,
    rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
    comment TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (user_id, store_id),
    FOREIGN KEY (user_id) REFERENCES users(user_id),
    FOREIGN KEY (store_id) REFERENCES stores(store_id)
);
CREATE INDEX IF NOT EXISTS idx_ratings_store ON ratings (store_id);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Drop pragmas and "--" comment lines so the DDL can be split on ";".
    lines = [
        ln
        for ln in ddl.splitlines()
        if not ln.strip().upper().startswith("PRAGMA ") and not ln.strip().startswith("--")
    ]
    out = "\n".join(lines)
    return re.sub(
        r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT",
        "BIGSERIAL PRIMARY KEY",
        out,
        flags=re.IGNORECASE,
    )


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    if (dialect or "").lower().startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE


def schema_statements(dialect: str) -> list[str]:
    """Schema DDL as individual statements (psycopg2 runs one at a time)."""
    return [s.strip() for s in get_schema_sql(dialect).split(";") if s.strip()]
