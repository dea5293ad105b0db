import asyncio
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from technova.core.errors import TransientIOError
from technova.models import InteractionEvent

logger = logging.getLogger("technova.store")


class EventStore:
    """Append-only interaction log: insert and query, nothing else."""

    async def insert(self, event: InteractionEvent) -> None:
        await self.insert_many([event])

    async def insert_many(self, events: Iterable[InteractionEvent]) -> None:
        raise NotImplementedError

    async def query(
        self,
        user_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[InteractionEvent]:
        """Events matching the filters, ordered by created_at.

        ``since`` is inclusive, ``until`` exclusive.
        """
        raise NotImplementedError


class MongoEventStore(EventStore):
    def __init__(self, collection) -> None:
        self._coll = collection

    async def ensure_indexes(self) -> None:
        try:
            await self._coll.create_index([("user_id", ASCENDING), ("created_at", ASCENDING)])
            await self._coll.create_index([("created_at", DESCENDING)])
        except PyMongoError as e:
            raise TransientIOError("could not create interaction indexes") from e

    async def insert_many(self, events: Iterable[InteractionEvent]) -> None:
        docs = [e.model_dump(mode="python") for e in events]
        for d in docs:
            d["interaction_type"] = d["interaction_type"].value
        if not docs:
            return
        try:
            await self._coll.insert_many(docs, ordered=True)
        except PyMongoError as e:
            raise TransientIOError("event store insert failed") from e

    async def query(
        self,
        user_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[InteractionEvent]:
        q: dict = {}
        if user_id is not None:
            q["user_id"] = user_id
        if since is not None or until is not None:
            q["created_at"] = {}
            if since is not None:
                q["created_at"]["$gte"] = since
            if until is not None:
                q["created_at"]["$lt"] = until

        cursor = self._coll.find(q, {"_id": 0}).sort("created_at", DESCENDING if descending else ASCENDING)
        if limit:
            cursor = cursor.limit(limit)

        try:
            docs = await cursor.to_list(length=limit or None)
        except PyMongoError as e:
            raise TransientIOError("event store query failed") from e

        out: List[InteractionEvent] = []
        for d in docs:
            try:
                out.append(InteractionEvent.model_validate(d))
            except ValueError:
                logger.warning("skipping malformed interaction document: %r", d)
        return out


class InMemoryEventStore(EventStore):
    def __init__(self, events: Iterable[InteractionEvent] = ()) -> None:
        self._lock = asyncio.Lock()
        self._events: List[InteractionEvent] = list(events)

    async def insert_many(self, events: Iterable[InteractionEvent]) -> None:
        async with self._lock:
            self._events.extend(events)

    async def query(
        self,
        user_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[InteractionEvent]:
        async with self._lock:
            matched = [
                e
                for e in self._events
                if (user_id is None or e.user_id == user_id)
                and (since is None or e.created_at >= since)
                and (until is None or e.created_at < until)
            ]
        # sort is stable, so equal timestamps keep insertion order
        matched.sort(key=lambda e: e.created_at, reverse=descending)
        if limit:
            matched = matched[:limit]
        return matched
