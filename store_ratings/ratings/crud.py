from __future__ import annotations

from typing import Any, Dict, List, Optional

from store_ratings.errors import NotFound, OutOfRange
from store_ratings.stores.crud import get_store_by_id
from store_ratings.util.time import utcnow_iso


RATING_MIN = 1
RATING_MAX = 5


def _debug(msg: str) -> None:
    print(f"[ratings] {msg}")


def public_rating(row: Any) -> Dict[str, Any]:
    d = dict(row)
    out: Dict[str, Any] = {
        "id": int(d["rating_id"]),
        "userId": int(d["user_id"]),
        "storeId": int(d["store_id"]),
        "rating": int(d["rating"]),
        "comment": d.get("comment"),
        "createdAt": d.get("created_at"),
        "updatedAt": d.get("updated_at"),
    }
    # Present when joined with users (store dashboard).
    if "user_name" in d:
        out["userName"] = d["user_name"]
    if "user_email" in d:
        out["userEmail"] = d["user_email"]
    return out


def check_rating_value(value: Any) -> int:
    # bool is an int subclass; True must not count as a 1-star rating.
    if isinstance(value, bool) or not isinstance(value, int):
        raise OutOfRange()
    if value < RATING_MIN or value > RATING_MAX:
        raise OutOfRange()
    return value


def get_rating(conn: Any, *, user_id: int, store_id: int) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM ratings WHERE user_id=? AND store_id=?",
        (int(user_id), int(store_id)),
    ).fetchone()


def submit_or_replace_rating(
    conn: Any,
    *,
    user_id: int,
    store_id: int,
    value: Any,
    comment: Optional[str] = None,
) -> Dict[str, Any]:
    """Insert the (user, store) rating, or replace the existing one.

    The pair is the key: rating the same store again overwrites value and comment
    and keeps the original created_at.
    """
    rating = check_rating_value(value)
    if get_store_by_id(conn, store_id) is None:
        raise NotFound("Store not found", field="storeId")

    now = utcnow_iso()
    conn.execute(
        """
        INSERT INTO ratings (user_id, store_id, rating, comment, created_at, updated_at)
        VALUES (?,?,?,?,?,?)
        ON CONFLICT(user_id, store_id) DO UPDATE SET
            rating=excluded.rating,
            comment=excluded.comment,
            updated_at=excluded.updated_at
        """,
        (int(user_id), int(store_id), rating, (comment or None), now, now),
    )
    _debug(f"user_id={user_id} rated store_id={store_id} value={rating}")

    row = get_rating(conn, user_id=user_id, store_id=store_id)
    assert row is not None
    return public_rating(row)


def list_store_ratings(conn: Any, store_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT r.*, u.name AS user_name, u.email AS user_email
        FROM ratings r
        JOIN users u ON u.user_id = r.user_id
        WHERE r.store_id=?
        ORDER BY r.updated_at DESC, r.rating_id DESC
        """,
        (int(store_id),),
    ).fetchall()
    return [public_rating(r) for r in rows]


def ratings_by_user(conn: Any, user_id: int) -> Dict[int, int]:
    """store_id -> rating value for everything this user has rated."""
    rows = conn.execute(
        "SELECT store_id, rating FROM ratings WHERE user_id=?",
        (int(user_id),),
    ).fetchall()
    return {int(r["store_id"]): int(r["rating"]) for r in rows}


def count_ratings(conn: Any) -> int:
    return int(conn.execute("SELECT COUNT(*) AS n FROM ratings").fetchone()["n"])
