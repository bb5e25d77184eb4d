"""Tests for the rating upsert and the derived aggregates."""

import pytest

from store_ratings.auth.service import create_account
from store_ratings.errors import NotFound, OutOfRange
from store_ratings.models import RatingAggregate
from store_ratings.ratings import (
    aggregate_ratings,
    aggregates_by_store,
    compute_store_aggregate,
    list_store_ratings,
    submit_or_replace_rating,
)


def _account(conn, email, role="user", name="Alexandra Catherine Smith"):
    return create_account(conn, name=name, email=email, password="Abcdef1!", role=role)


@pytest.fixture
def store_id(conn):
    return _account(conn, "owner@shop.com", role="store", name="Downtown Coffee Roasters Shop").store["id"]


class TestAggregateRatings:
    def test_empty_is_zero(self):
        assert aggregate_ratings([]) == RatingAggregate(count=0, average=0.0)

    @pytest.mark.parametrize("values", [[5], [1, 2], [3, 4, 4], [1, 1, 1, 5, 5, 2]])
    def test_mean(self, values):
        agg = aggregate_ratings(values)
        assert agg.count == len(values)
        assert agg.average == pytest.approx(sum(values) / len(values))


class TestSubmitOrReplace:
    def test_rerating_replaces(self, conn, store_id):
        uid = _account(conn, "u1@example.com").user["id"]
        submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=3)
        second = submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=5)

        rows = conn.execute(
            "SELECT rating FROM ratings WHERE user_id=? AND store_id=?",
            (uid, store_id),
        ).fetchall()
        assert len(rows) == 1
        assert rows[0]["rating"] == 5
        assert second["rating"] == 5

    def test_comment_replaced_too(self, conn, store_id):
        uid = _account(conn, "u1@example.com").user["id"]
        submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=2, comment="slow")
        r = submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=4)
        assert r["comment"] is None

    @pytest.mark.parametrize("value", [0, 6, -1, 4.5, "5", None, True])
    def test_out_of_range(self, conn, store_id, value):
        uid = _account(conn, "u1@example.com").user["id"]
        with pytest.raises(OutOfRange):
            submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=value)

    def test_unknown_store(self, conn):
        uid = _account(conn, "u1@example.com").user["id"]
        with pytest.raises(NotFound):
            submit_or_replace_rating(conn, user_id=uid, store_id=12345, value=4)


class TestStoreAggregate:
    def test_no_ratings(self, conn, store_id):
        assert compute_store_aggregate(conn, store_id) == RatingAggregate(count=0, average=0.0)

    def test_matches_rows(self, conn, store_id):
        values = [5, 4, 2]
        for i, v in enumerate(values):
            uid = _account(conn, f"u{i}@example.com").user["id"]
            submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=v)

        agg = compute_store_aggregate(conn, store_id)
        assert agg.count == 3
        assert agg.average == pytest.approx(11 / 3)

    def test_recomputed_after_rerate(self, conn, store_id):
        a = _account(conn, "a@example.com").user["id"]
        b = _account(conn, "b@example.com").user["id"]
        submit_or_replace_rating(conn, user_id=a, store_id=store_id, value=1)
        submit_or_replace_rating(conn, user_id=b, store_id=store_id, value=3)
        assert compute_store_aggregate(conn, store_id).average == pytest.approx(2.0)

        submit_or_replace_rating(conn, user_id=a, store_id=store_id, value=5)
        assert compute_store_aggregate(conn, store_id) == RatingAggregate(count=2, average=4.0)

    def test_aggregates_by_store(self, conn, store_id):
        other = _account(conn, "other@shop.com", role="store", name="Uptown Bakery And Pastries").store["id"]
        uid = _account(conn, "u1@example.com").user["id"]
        submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=2)
        submit_or_replace_rating(conn, user_id=uid, store_id=other, value=5)

        aggs = aggregates_by_store(conn)
        assert aggs[store_id] == RatingAggregate(count=1, average=2.0)
        assert aggs[other] == RatingAggregate(count=1, average=5.0)


def test_list_store_ratings_includes_rater(conn, store_id):
    uid = _account(conn, "rater@example.com").user["id"]
    submit_or_replace_rating(conn, user_id=uid, store_id=store_id, value=4, comment="Great beans")

    (r,) = list_store_ratings(conn, store_id)
    assert r["userId"] == uid
    assert r["userEmail"] == "rater@example.com"
    assert r["userName"] == "Alexandra Catherine Smith"
    assert r["rating"] == 4
    assert r["comment"] == "Great beans"
