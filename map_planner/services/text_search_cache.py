# map_planner/services/text_search_cache.py

import asyncio
import time
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple

from map_planner.core.logging_config import logger
from map_planner.models.schemas import Candidate
from map_planner.services.google_places_client import SearchClient


class TextSearchCache:
    """
    Caches text-search lookups by exact query string.

    Entries expire after `ttl_seconds`; once `capacity` is reached the least
    recently used entry is evicted. Failed lookups are not cached. Concurrent
    lookups of the same query share one upstream request.
    """

    def __init__(
        self,
        search_client: SearchClient,
        capacity: int = 200,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.search_client = search_client
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Candidate]]" = OrderedDict()
        self._pending: Dict[str, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def peek(self, query: str) -> Optional[Candidate]:
        entry = self._entries.get(query)
        if entry is None:
            return None
        expires_at, candidate = entry
        if expires_at <= self._clock():
            del self._entries[query]
            return None
        return candidate

    async def get(self, query: str) -> Candidate:
        cached = self.peek(query)
        if cached is not None:
            self._entries.move_to_end(query)
            return cached

        pending = self._pending.get(query)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._pending[query] = future
        try:
            candidate = await self.search_client.text_search(query)
            self._store(query, candidate)
            future.set_result(candidate)
            return candidate
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so a lookup with no waiters doesn't warn.
            future.exception()
            raise
        finally:
            if not future.done():
                future.cancel()
            self._pending.pop(query, None)

    def _store(self, query: str, candidate: Candidate) -> None:
        self._entries[query] = (self._clock() + self.ttl_seconds, candidate)
        self._entries.move_to_end(query)
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"TextSearchCache: evicted {evicted!r}")
