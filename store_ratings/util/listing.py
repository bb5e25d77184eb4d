"""Search + sort for the admin tables (name/email/address filter, column sort)."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from store_ratings.errors import ValidationError


SORT_ORDERS = ("asc", "desc")


def filter_rows(
    rows: Iterable[Dict[str, Any]],
    q: Optional[str],
    fields: Sequence[str],
) -> List[Dict[str, Any]]:
    """Case-insensitive substring match of `q` against any of `fields`."""
    needle = (q or "").strip().lower()
    out = list(rows)
    if not needle:
        return out
    return [r for r in out if any(needle in str(r.get(f) or "").lower() for f in fields)]


def sort_rows(
    rows: List[Dict[str, Any]],
    sort: Optional[str],
    order: Optional[str],
    allowed: Sequence[str],
) -> List[Dict[str, Any]]:
    if not sort:
        return rows
    if sort not in allowed:
        raise ValidationError(f"Cannot sort by '{sort}'", field="sort")
    direction = (order or "asc").strip().lower()
    if direction not in SORT_ORDERS:
        raise ValidationError("Order must be 'asc' or 'desc'", field="order")

    def _key(r: Dict[str, Any]) -> tuple:
        v = r.get(sort)
        # Missing values sort last in ascending order; numbers compare numerically.
        if v is None:
            return (1, 0, "")
        if isinstance(v, (int, float)):
            return (0, v, "")
        return (0, 0, str(v).lower())

    return sorted(rows, key=_key, reverse=(direction == "desc"))
