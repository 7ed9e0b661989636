"""Bounded response cache for GraphQL queries."""

import json
from collections import OrderedDict
from typing import Any

from todoapp.logging_config import get_logger

logger = get_logger(__name__)


def cache_key(document: str, variables: dict[str, Any] | None) -> str:
    """Build a cache key from a query document and its variables.

    Variables are serialized with sorted keys so that argument order
    does not produce distinct entries.
    """
    return document.strip() + "\n" + json.dumps(variables or {}, sort_keys=True, default=str)


class ResponseCache:
    """Least-recently-used cache of query results."""

    def __init__(self, max_entries: int = 128):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, dict[str, Any]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, document: str, variables: dict[str, Any] | None) -> dict[str, Any] | None:
        key = cache_key(document, variables)
        data = self._entries.get(key)
        if data is not None:
            self._entries.move_to_end(key)
        return data

    def set(self, document: str, variables: dict[str, Any] | None, data: dict[str, Any]) -> None:
        key = cache_key(document, variables)
        self._entries[key] = data
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, document: str, variables: dict[str, Any] | None) -> None:
        self._entries.pop(cache_key(document, variables), None)

    def clear(self) -> None:
        """Drop every cached response."""
        if self._entries:
            logger.debug("graphql_cache_cleared", entries=len(self._entries))
        self._entries.clear()
