"""
LayoutCache Port - Interface for caller-owned memoization of layout results.

The engine itself is stateless; callers that want reuse across identical
inputs inject an implementation keyed by `content_hash`.
"""

from abc import ABC, abstractmethod
from typing import Any


class LayoutCache(ABC):
    """
    Abstract interface for caching computed layouts.

    Implementations:
    - InMemoryLayoutCache: bounded LRU dictionary
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """
        Look up a cached value.

        Args:
            key: Content hash of the inputs

        Returns:
            The cached value, or None on a miss
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Store a value.

        Args:
            key: Content hash of the inputs
            value: Result to cache
        """
        ...

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached entry."""
        ...
