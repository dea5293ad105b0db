import asyncio

import pytest

from conftest import event
from reco_eval import (
    build_global_popularity,
    evaluate,
    precision_recall_f1,
    recommend_popular,
    user_type,
)
from technova.services.recommender import PersonalRecommender
from technova.services.store import InMemoryEventStore


def test_precision_recall_f1():
    assert precision_recall_f1([1, 2, 3, 4], {2, 9}) == pytest.approx((0.25, 0.5, 1 / 3))
    assert precision_recall_f1([], {1}) == (0.0, 0.0, 0.0)
    assert precision_recall_f1([1], {2}) == (0.0, 0.0, 0.0)


def test_segments():
    assert [user_type(n) for n in (3, 5, 19, 20)] == ["cold", "casual", "casual", "power"]


def test_popular_baseline_skips_seen():
    events = [event("u1", 9, "purchase"), event("u2", 9, "cart_add"), event("u2", 10, "purchase"), event("u3", 1, "view")]
    popular = build_global_popularity(events)
    assert popular == [9, 10]
    assert recommend_popular(popular, {9}, 5) == [10]


def test_evaluate_counts_users_with_held_out_positives(catalog):
    events = [
        event("u1", 9, "view", "electronics", days=5),
        event("u1", 11, "view", "electronics", days=4),
        event("u1", 9, "cart_add", "electronics", days=3),
        event("u1", 10, "purchase", "electronics", days=1),
        # too short to split
        event("u2", 1, "view", "men's clothing", days=2),
    ]
    products = asyncio.run(catalog.get_products())
    recommender = PersonalRecommender(InMemoryEventStore(), catalog)

    processed, stats = evaluate(events, products, recommender, k=3)

    assert processed == 1
    assert stats["personal"]["all"]["users"] == 1
    assert stats["personal"]["cold"]["users"] == 1
    # product 10 is the most popular electronics item
    assert stats["personal"]["all"]["rec_sum"] == 1.0
