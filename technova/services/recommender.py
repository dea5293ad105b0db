from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Set, Tuple

from technova.core.config import settings
from technova.core.errors import TransientIOError
from technova.core.http_client import CatalogClient
from technova.models import InteractionEvent, InteractionType, Product, Recommendation, RecommendedProduct, as_utc
from technova.services.store import EventStore

logger = logging.getLogger("technova.recommender")

TYPE_WEIGHTS: Dict[InteractionType, float] = {
    InteractionType.VIEW: 1.0,
    InteractionType.CART_ADD: 2.0,
    InteractionType.PURCHASE: 3.0,
}


def recency_decay(age: timedelta, half_life: timedelta) -> float:
    if age <= timedelta(0):
        return 1.0
    return 0.5 ** (age / half_life)


@dataclass
class UserProfile:
    category_weights: Dict[str, float] = field(default_factory=dict)
    product_scores: Dict[int, float] = field(default_factory=dict)
    purchased: Set[int] = field(default_factory=set)

    def top_categories(self, n: int) -> List[str]:
        ranked = sorted(self.category_weights.items(), key=lambda x: (-x[1], x[0]))
        return [c for c, _ in ranked[:n]]


def build_profile(
    events: List[InteractionEvent],
    now: datetime,
    half_life: timedelta,
    category_of: Callable[[int], Optional[str]] = lambda _pid: None,
) -> UserProfile:
    """
    - category weight: plain sum of type weights
    - product score: type weight decayed by the event's age
    - events stored without a category borrow the catalog's one
    """
    profile = UserProfile()
    for e in events:
        w = TYPE_WEIGHTS[e.interaction_type]
        cat = e.category or category_of(e.product_id)
        if cat:
            profile.category_weights[cat] = profile.category_weights.get(cat, 0.0) + w
        profile.product_scores[e.product_id] = (
            profile.product_scores.get(e.product_id, 0.0) + w * recency_decay(now - e.created_at, half_life)
        )
        if e.interaction_type == InteractionType.PURCHASE:
            profile.purchased.add(e.product_id)
    return profile


def _reason(dominant: str, category: str) -> str:
    if dominant == "affinity":
        return f"Because you liked {category}"
    if dominant == "popularity":
        return f"Popular in {category}"
    return "Based on your recent activity"


class PersonalRecommender:
    def __init__(self, store: EventStore, catalog: CatalogClient) -> None:
        self.store = store
        self.catalog = catalog
        self.lookback = timedelta(days=settings.reco_lookback_days)
        self.half_life = timedelta(days=settings.reco_half_life_days)
        self.top_n_categories = settings.reco_top_categories
        self.weights = {
            "affinity": settings.reco_affinity_weight,
            "popularity": settings.reco_popularity_weight,
            "interest": settings.reco_interest_weight,
        }

    def score_candidates(self, profile: UserProfile, products: List[Product]) -> List[Tuple[Recommendation, Product]]:
        top = profile.top_categories(self.top_n_categories)
        if not top:
            return []

        candidates = [p for p in products if p.category in top and p.id not in profile.purchased]
        if not candidates:
            return []

        max_affinity = max(profile.category_weights[c] for c in top)
        max_count = max(p.rating.count for p in candidates)
        max_interest = max(profile.product_scores.get(p.id, 0.0) for p in candidates)

        scored: List[Tuple[Recommendation, Product]] = []
        for p in candidates:
            signals = {
                "affinity": profile.category_weights[p.category] / max_affinity,
                "popularity": p.rating.count / max_count if max_count > 0 else 0.0,
                "interest": profile.product_scores.get(p.id, 0.0) / max_interest if max_interest > 0 else 0.0,
            }
            parts = {k: max(0.0, self.weights[k] * v) for k, v in signals.items()}
            # ties resolve in dict order: affinity, popularity, interest
            dominant = max(parts, key=parts.get)
            rec = Recommendation(
                product_id=p.id,
                score=round(sum(parts.values()), 6),
                reason=_reason(dominant, p.category),
            )
            scored.append((rec, p))

        scored.sort(key=lambda x: (-x[0].score, x[0].product_id))
        return scored

    async def _rank(self, user_id: str, limit: int, now: Optional[datetime]) -> List[Tuple[Recommendation, Product]]:
        if not user_id or limit <= 0:
            return []
        now = as_utc(now) if now else datetime.now(timezone.utc)

        try:
            events = await self.store.query(user_id=user_id, since=now - self.lookback)
        except TransientIOError as e:
            logger.warning("recommendations for %s degraded, event store unavailable: %s", user_id, e)
            return []
        if not events:
            return []

        try:
            products = await self.catalog.get_products()
        except TransientIOError as e:
            logger.warning("recommendations for %s degraded, catalog unavailable: %s", user_id, e)
            return []

        by_id = {p.id: p for p in products}

        def category_of(pid: int) -> Optional[str]:
            p = by_id.get(pid)
            return p.category if p else None

        profile = build_profile(events, now, self.half_life, category_of)
        return self.score_candidates(profile, products)[:limit]

    async def recommend(self, user_id: str, limit: int = 8, now: Optional[datetime] = None) -> List[Recommendation]:
        return [rec for rec, _ in await self._rank(user_id, limit, now)]

    async def recommend_products(
        self, user_id: str, limit: int = 8, now: Optional[datetime] = None
    ) -> List[RecommendedProduct]:
        return [
            RecommendedProduct(product=p, score=rec.score, reason=rec.reason)
            for rec, p in await self._rank(user_id, limit, now)
        ]
