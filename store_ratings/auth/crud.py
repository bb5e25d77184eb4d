from __future__ import annotations

from typing import Any, Dict, List, Optional

from store_ratings.db import is_integrity_error
from store_ratings.errors import DuplicateEmail
from store_ratings.models import Role
from store_ratings.util.time import utcnow_iso


def normalize_email(email: Any) -> str:
    return str(email or "").strip().lower()


def public_user(row: Any) -> Dict[str, Any]:
    """User view safe to return to clients (no password hash)."""
    d = dict(row)
    return {
        "id": int(d["user_id"]),
        "name": d.get("name"),
        "email": d.get("email"),
        "address": d.get("address"),
        "role": d.get("role"),
        "createdAt": d.get("created_at"),
    }


def get_user_by_email(conn: Any, email: str) -> Optional[Any]:
    e = normalize_email(email)
    if not e:
        return None
    return conn.execute("SELECT * FROM users WHERE email=?", (e,)).fetchone()


def get_user_by_id(conn: Any, user_id: int) -> Optional[Any]:
    return conn.execute("SELECT * FROM users WHERE user_id=?", (int(user_id),)).fetchone()


def email_in_use(conn: Any, email: str) -> bool:
    e = normalize_email(email)
    row = conn.execute(
        "SELECT 1 FROM users WHERE email=? UNION ALL SELECT 1 FROM stores WHERE email=?",
        (e, e),
    ).fetchone()
    return row is not None


def insert_user(
    conn: Any,
    *,
    name: str,
    email: str,
    password_hash: str,
    address: Optional[str],
    role: Role,
) -> Any:
    """Insert a user row and return it. Duplicate emails raise DuplicateEmail."""
    e = normalize_email(email)
    if email_in_use(conn, e):
        raise DuplicateEmail()

    now = utcnow_iso()
    try:
        conn.execute(
            """
            INSERT INTO users (name, email, password_hash, address, role, created_at, updated_at)
            VALUES (?,?,?,?,?,?,?)
            """,
            (name, e, password_hash, (address or None), Role.parse(role).value, now, now),
        )
    except Exception as exc:
        # A concurrent registration won the race on the unique index.
        if is_integrity_error(exc):
            raise DuplicateEmail() from exc
        raise

    row = get_user_by_email(conn, e)
    assert row is not None
    return row


def update_password_hash(conn: Any, *, user_id: int, password_hash: str) -> int:
    """Overwrite the stored digest; returns the number of rows touched."""
    cur = conn.execute(
        "UPDATE users SET password_hash=?, updated_at=? WHERE user_id=?",
        (password_hash, utcnow_iso(), int(user_id)),
    )
    return int(cur.rowcount or 0)


def count_users(conn: Any, role: Optional[Role] = None) -> int:
    if role is None:
        row = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()
    else:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM users WHERE role=?",
            (Role.parse(role).value,),
        ).fetchone()
    return int(row["n"])


def list_users(conn: Any, *, role: Optional[Role] = None) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM users"
    params: List[Any] = []
    if role is not None:
        sql += " WHERE role=?"
        params.append(Role.parse(role).value)
    sql += " ORDER BY user_id"
    return [public_user(r) for r in conn.execute(sql, tuple(params)).fetchall()]
