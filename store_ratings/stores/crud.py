from __future__ import annotations

from typing import Any, Dict, List, Optional

from store_ratings.db import is_integrity_error
from store_ratings.errors import DuplicateEmail
from store_ratings.models import RatingAggregate
from store_ratings.util.time import utcnow_iso


def public_store(row: Any, aggregate: Optional[RatingAggregate] = None) -> Dict[str, Any]:
    d = dict(row)
    out: Dict[str, Any] = {
        "id": int(d["store_id"]),
        "ownerId": int(d["owner_user_id"]),
        "name": d.get("name"),
        "email": d.get("email"),
        "address": d.get("address"),
        "createdAt": d.get("created_at"),
    }
    if aggregate is not None:
        out["averageRating"] = aggregate.average
        out["totalRatings"] = aggregate.count
    return out


def get_store_by_id(conn: Any, store_id: int) -> Optional[Any]:
    return conn.execute("SELECT * FROM stores WHERE store_id=?", (int(store_id),)).fetchone()


def get_store_by_owner(conn: Any, owner_user_id: int) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM stores WHERE owner_user_id=?",
        (int(owner_user_id),),
    ).fetchone()


def insert_store(
    conn: Any,
    *,
    owner_user_id: int,
    name: str,
    email: str,
    address: Optional[str],
) -> Any:
    """Insert the store row for an existing store-role user."""
    try:
        conn.execute(
            """
            INSERT INTO stores (owner_user_id, name, email, address, created_at)
            VALUES (?,?,?,?,?)
            """,
            (int(owner_user_id), name, email, (address or None), utcnow_iso()),
        )
    except Exception as exc:
        if is_integrity_error(exc):
            raise DuplicateEmail() from exc
        raise

    row = get_store_by_owner(conn, owner_user_id)
    assert row is not None
    return row


def list_stores(conn: Any) -> List[Any]:
    return conn.execute("SELECT * FROM stores ORDER BY store_id").fetchall()


def count_stores(conn: Any) -> int:
    return int(conn.execute("SELECT COUNT(*) AS n FROM stores").fetchone()["n"])
