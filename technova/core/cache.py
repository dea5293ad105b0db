import time
import asyncio
from typing import Any, Awaitable, Callable, Dict, Tuple


class TTLCache:
    def __init__(self, ttl_seconds: int = 60):
        self.ttl = ttl_seconds
        self._data: Dict[str, Tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    async def get_or_set(self, key: str, producer: Callable[[], Awaitable[Any]]):
        if self.ttl <= 0:
            return await producer()

        now = time.monotonic()
        async with self._lock:
            if key in self._data:
                ts, val = self._data[key]
                if now - ts < self.ttl:
                    return val
            # a failing producer leaves the previous entry untouched
            val = await producer()
            self._data[key] = (now, val)
            return val
