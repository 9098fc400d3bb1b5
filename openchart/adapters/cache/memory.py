"""
In-Memory Layout Cache - Bounded LRU implementation of LayoutCache.
"""

import logging
from collections import OrderedDict
from typing import Any

from openchart.core.ports.layout_cache import LayoutCache

logger = logging.getLogger(__name__)


class InMemoryLayoutCache(LayoutCache):
    """
    Least-recently-used cache owned by the caller (one per chart, view, etc.).
    """

    def __init__(self, max_entries: int = 128):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, Any] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted layout cache entry {evicted[:12]}")

    def clear(self) -> None:
        self._entries.clear()
