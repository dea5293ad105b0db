import asyncio
import math

import pytest

from conftest import make_catalog
from technova.services.similarity import SimilarityScorer, price_proximity


def _catalog():
    return make_catalog([
        {"id": 1, "title": "p1", "price": 10, "category": "A"},
        {"id": 2, "title": "p2", "price": 12, "category": "A"},
        {"id": 3, "title": "p3", "price": 50, "category": "B"},
    ])


def test_category_and_price_rank_candidates():
    scorer = SimilarityScorer(_catalog())

    out = asyncio.run(scorer.similar(1, "A", 10, 2))

    assert [p.id for p in out] == [2, 3]
    products = {p.id: p for p in out}
    assert scorer.score(products[2], "A", 10) > scorer.score(products[3], "A", 10)
    assert scorer.score(products[2], "A", 10) == pytest.approx(0.7 + 0.3 * math.exp(-0.2))


@pytest.mark.parametrize("limit", [0, 1, 2, 5])
def test_never_returns_seed_or_more_than_limit(catalog, limit):
    scorer = SimilarityScorer(catalog)
    for seed in (1, 5, 9, 42):
        out = asyncio.run(scorer.similar(seed, "electronics", 100, limit))
        assert seed not in [p.id for p in out]
        assert len(out) <= limit


def test_ties_break_by_product_id(catalog):
    out = asyncio.run(SimilarityScorer(catalog).similar(9, "electronics", 64, 2))
    # 10 and 11 share category and price
    assert [p.id for p in out] == [10, 11]


def test_unreachable_catalog_gives_empty_list(down_catalog):
    assert asyncio.run(SimilarityScorer(down_catalog).similar(1, "A", 10, 4)) == []


def test_price_proximity_handles_free_seed():
    assert price_proximity(0, 0) == 1.0
    assert price_proximity(2, 0) == pytest.approx(math.exp(-2))


def test_category_weight_must_dominate(catalog):
    with pytest.raises(ValueError):
        SimilarityScorer(catalog, category_weight=0.3, price_weight=0.7)
