import logging
from typing import Iterable, Optional

from technova.core.errors import TransientIOError, ValidationError
from technova.models import InteractionEvent, InteractionType, OrderItem, RecordResult
from technova.services.store import EventStore

logger = logging.getLogger("technova.recorder")


def parse_interaction_type(value) -> InteractionType:
    if isinstance(value, InteractionType):
        return value
    try:
        return InteractionType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in InteractionType)
        raise ValidationError(f"interaction_type must be one of: {allowed}") from None


def _product_id(value) -> int:
    if value is None or value == "":
        raise ValidationError("product_id is required")
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("product_id must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("product_id must be an integer") from None


class InteractionRecorder:
    """Validates interaction events and appends them to the event store.

    Tracking is best effort: storage failures are logged and reported as
    ``success=False`` but never raised, so the page render or cart update
    that triggered them carries on. Anonymous callers are a no-op.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store

    def build_event(
        self,
        user_id: str,
        product_id,
        interaction_type,
        category: Optional[str] = None,
    ) -> InteractionEvent:
        return InteractionEvent(
            user_id=user_id,
            product_id=_product_id(product_id),
            interaction_type=parse_interaction_type(interaction_type),
            category=(category or "").strip() or None,
        )

    async def record(
        self,
        user_id: Optional[str],
        product_id,
        interaction_type,
        category: Optional[str] = None,
    ) -> RecordResult:
        if not user_id:
            return RecordResult(success=True)

        event = self.build_event(user_id, product_id, interaction_type, category)
        try:
            await self.store.insert(event)
        except TransientIOError as e:
            logger.warning(
                "tracking %s of product %s for user %s failed: %s",
                event.interaction_type.value, event.product_id, user_id, e,
            )
            return RecordResult(success=False)
        return RecordResult(success=True, recorded=1)

    async def record_many(
        self,
        user_id: Optional[str],
        items: Iterable[OrderItem],
        interaction_type=InteractionType.PURCHASE,
    ) -> RecordResult:
        if not user_id:
            return RecordResult(success=True)

        events = [self.build_event(user_id, i.product_id, interaction_type, i.category) for i in items]
        if not events:
            return RecordResult(success=True)
        try:
            await self.store.insert_many(events)
        except TransientIOError as e:
            logger.warning("tracking %d events for user %s failed: %s", len(events), user_id, e)
            return RecordResult(success=False)
        return RecordResult(success=True, recorded=len(events))

    async def dispatch(
        self,
        user_id: Optional[str],
        product_id,
        interaction_type,
        category: Optional[str] = None,
    ) -> None:
        """Background entry point: the outcome is only visible in the logs."""
        try:
            result = await self.record(user_id, product_id, interaction_type, category)
        except ValidationError as e:
            logger.warning("dropping invalid interaction for user %s: %s", user_id, e)
            return
        if result.success and result.recorded:
            logger.debug("tracked %s of product %s for user %s", interaction_type, product_id, user_id)

    async def dispatch_many(self, user_id: Optional[str], items: Iterable[OrderItem]) -> None:
        try:
            await self.record_many(user_id, list(items))
        except ValidationError as e:
            logger.warning("dropping invalid order tracking for user %s: %s", user_id, e)
