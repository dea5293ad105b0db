import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from technova.core.config import settings
from technova.models import (
    AnalyticsSnapshot,
    CategoryCount,
    DailyInteraction,
    InteractionEvent,
    InteractionType,
    InteractionTypeTrend,
    as_utc,
)
from technova.services.store import EventStore

logger = logging.getLogger("technova.analytics")


def trailing_days(today: date, days: int) -> List[date]:
    """``days`` calendar days ending with ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def popular_categories(events: List[InteractionEvent]) -> List[CategoryCount]:
    counts = Counter(e.category for e in events if e.category)
    ranked = sorted(counts.items(), key=lambda x: (-x[1], x[0]))
    return [CategoryCount(category=c, count=n) for c, n in ranked]


def _counts_by_day(events: List[InteractionEvent], window: List[date]) -> Dict[date, Counter]:
    buckets: Dict[date, Counter] = {d: Counter() for d in window}
    for e in events:
        day = e.created_at.astimezone(timezone.utc).date()
        if day in buckets:
            buckets[day][e.interaction_type] += 1
    return buckets


def daily_interactions(events: List[InteractionEvent], today: date, days: int) -> List[DailyInteraction]:
    window = trailing_days(today, days)
    buckets = _counts_by_day(events, window)
    out: List[DailyInteraction] = []
    for d in window:
        c = buckets[d]
        out.append(
            DailyInteraction(
                date=d,
                views=c[InteractionType.VIEW],
                cart_adds=c[InteractionType.CART_ADD],
                purchases=c[InteractionType.PURCHASE],
                total=sum(c.values()),
            )
        )
    return out


def interaction_types_trend(events: List[InteractionEvent], today: date, days: int) -> List[InteractionTypeTrend]:
    window = trailing_days(today, days)
    buckets = _counts_by_day(events, window)
    return [
        InteractionTypeTrend(
            date=d,
            view=buckets[d][InteractionType.VIEW],
            cart_add=buckets[d][InteractionType.CART_ADD],
            purchase=buckets[d][InteractionType.PURCHASE],
        )
        for d in window
    ]


class AnalyticsAggregator:
    """Rolls the full interaction log up into the admin dashboard snapshot.

    Read-only: it never writes to the store, so repeated or concurrent calls
    over the same history give the same answer. Store failures propagate.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store
        self.recent_limit = settings.analytics_recent_limit
        self.daily_days = settings.analytics_daily_days
        self.trend_days = settings.analytics_trend_days

    def reduce(self, events: List[InteractionEvent], now: datetime) -> AnalyticsSnapshot:
        today = as_utc(now).date()
        by_type = Counter(e.interaction_type for e in events)

        # stable sort keeps later-inserted events first among equal timestamps
        newest_first = sorted(reversed(events), key=lambda e: e.created_at, reverse=True)

        return AnalyticsSnapshot(
            total_users=len({e.user_id for e in events}),
            total_interactions=len(events),
            total_views=by_type[InteractionType.VIEW],
            total_cart_adds=by_type[InteractionType.CART_ADD],
            total_purchases=by_type[InteractionType.PURCHASE],
            popular_categories=popular_categories(events),
            recent_interactions=newest_first[: self.recent_limit],
            daily_interactions=daily_interactions(events, today, self.daily_days),
            interaction_types_trend=interaction_types_trend(events, today, self.trend_days),
        )

    async def snapshot(self, now: Optional[datetime] = None) -> AnalyticsSnapshot:
        now = as_utc(now) if now else datetime.now(timezone.utc)
        events = await self.store.query()
        logger.debug("analytics snapshot over %d events", len(events))
        return self.reduce(events, now)
