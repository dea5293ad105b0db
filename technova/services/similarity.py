import logging
import math
from typing import List, Optional, Tuple

from technova.core.config import settings
from technova.core.errors import TransientIOError
from technova.core.http_client import CatalogClient
from technova.models import Product

logger = logging.getLogger("technova.similarity")


def price_proximity(price: float, seed_price: float) -> float:
    """exp(-|price - seed| / seed), 1.0 for an identical price.

    A non-positive seed price has no scale to compare against, so the raw
    difference is used instead.
    """
    scale = seed_price if seed_price > 0 else 1.0
    return math.exp(-abs(price - seed_price) / scale)


class SimilarityScorer:
    def __init__(
        self,
        catalog: CatalogClient,
        category_weight: Optional[float] = None,
        price_weight: Optional[float] = None,
    ) -> None:
        self.catalog = catalog
        self.category_weight = settings.similarity_category_weight if category_weight is None else category_weight
        self.price_weight = settings.similarity_price_weight if price_weight is None else price_weight
        if self.category_weight <= self.price_weight:
            raise ValueError("category weight must dominate price weight")

    def score(self, candidate: Product, seed_category: Optional[str], seed_price: float) -> float:
        same_category = 1.0 if seed_category and candidate.category == seed_category else 0.0
        return self.category_weight * same_category + self.price_weight * price_proximity(candidate.price, seed_price)

    def rank(
        self,
        products: List[Product],
        seed_product_id: int,
        seed_category: Optional[str],
        seed_price: float,
        limit: int,
    ) -> List[Product]:
        if limit <= 0:
            return []

        scored: List[Tuple[float, Product]] = []
        for p in products:
            if p.id == seed_product_id:
                continue
            scored.append((self.score(p, seed_category, seed_price), p))

        scored.sort(key=lambda x: (-x[0], x[1].id))
        return [p for _, p in scored[:limit]]

    async def similar(
        self,
        seed_product_id: int,
        seed_category: Optional[str],
        seed_price: float,
        limit: int = 4,
    ) -> List[Product]:
        try:
            products = await self.catalog.get_products()
        except TransientIOError as e:
            logger.warning("similar products for %s unavailable: %s", seed_product_id, e)
            return []
        return self.rank(products, seed_product_id, seed_category, seed_price, limit)
