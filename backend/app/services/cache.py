"""Read-through cache for reference data (offices, election metrics)."""

import asyncio
import copy
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from ..logging import get_logger


logger = get_logger(__name__)


class ReferenceCache:
    """TTL cache with explicit invalidation.

    One instance is owned by the application and shared by the routers; a
    ``ttl_seconds`` of 0 disables caching.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self._ttl = max(ttl_seconds, 0.0)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = asyncio.Lock()

    def get(self, key: str) -> Optional[Any]:
        if self._ttl <= 0:
            return None
        item = self._entries.get(key)
        if item is None:
            return None
        expire_at, value = item
        if expire_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        if self._ttl <= 0:
            return
        self._entries[key] = (self._clock() + self._ttl, copy.deepcopy(value))

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key`` or await ``loader`` and store it.

        Loader failures propagate and nothing is cached.
        """
        cached = self.get(key)
        if cached is not None:
            return cached
        async with self._lock:
            cached = self.get(key)
            if cached is not None:
                return cached
            value = await loader()
            self.set(key, value)
            logger.debug("reference_cache_loaded", key=key)
            return value

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
        logger.info("reference_cache_invalidated", key=key or "*")


def cache_key(*parts: object) -> str:
    return "|".join("" if part is None else str(part) for part in parts)
