from __future__ import annotations

from collections import defaultdict
from statistics import mean
from typing import Any, Dict, Iterable, List

from store_ratings.models import RatingAggregate


def aggregate_ratings(values: Iterable[int]) -> RatingAggregate:
    """Count + arithmetic mean of rating values; average is 0.0 when there are none."""
    vals = [int(v) for v in values]
    if not vals:
        return RatingAggregate(count=0, average=0.0)
    return RatingAggregate(count=len(vals), average=float(mean(vals)))


def compute_store_aggregate(conn: Any, store_id: int) -> RatingAggregate:
    """Recompute a store's aggregate from its current rating rows (never cached)."""
    rows = conn.execute(
        "SELECT rating FROM ratings WHERE store_id=?",
        (int(store_id),),
    ).fetchall()
    return aggregate_ratings(r["rating"] for r in rows)


def aggregates_by_store(conn: Any) -> Dict[int, RatingAggregate]:
    """Aggregates for every store with at least one rating, from a single scan."""
    grouped: Dict[int, List[int]] = defaultdict(list)
    for r in conn.execute("SELECT store_id, rating FROM ratings").fetchall():
        grouped[int(r["store_id"])].append(int(r["rating"]))
    return {sid: aggregate_ratings(vals) for sid, vals in grouped.items()}
