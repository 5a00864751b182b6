"""
storages/memory_storage.py
--------------------------
A small LRU cache with per-entry expiry.
One instance is created per entity type (persons, chats, tokens, applications).
"""

import time
from collections import OrderedDict
from typing import Any, Callable, Hashable

from utils.logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


class MemoryStorage:
    """
    Key/value cache bounded by size and age.

    Args:
        name: Used in log messages only.
        ttl_seconds: Entry lifetime; 0 disables caching entirely.
        maxsize: Oldest entries are evicted beyond this many items.
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float = 300,
        maxsize: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.maxsize = maxsize
        self._clock = clock
        self._items: OrderedDict[Hashable, tuple[Any, float]] = OrderedDict()

    def get(self, key: Hashable, default: Any = None) -> Any:
        item = self._items.get(key, _MISSING)
        if item is _MISSING:
            return default
        value, stored_at = item
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._items[key]
            return default
        self._items.move_to_end(key)
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        self._items[key] = (value, self._clock())
        self._items.move_to_end(key)
        while len(self._items) > self.maxsize:
            evicted, _ = self._items.popitem(last=False)
            logger.debug(f"{self.name} storage evicted {evicted!r}")

    def delete(self, key: Hashable) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._items)
