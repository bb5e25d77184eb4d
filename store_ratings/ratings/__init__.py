"""Ratings: the (user, store) upsert and the derived per-store aggregate."""

from .aggregate import aggregate_ratings, aggregates_by_store, compute_store_aggregate
from .crud import list_store_ratings, submit_or_replace_rating

__all__ = [
    "aggregate_ratings",
    "aggregates_by_store",
    "compute_store_aggregate",
    "list_store_ratings",
    "submit_or_replace_rating",
]
