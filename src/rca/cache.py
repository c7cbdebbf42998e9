# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Repository response cache contracts and in-memory backend."""

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS: float = 3600.0
DEFAULT_MAX_ENTRIES: int = 128


class CacheError(RuntimeError):
    """Represent a fatal cache backend failure."""


class RepoCache(Protocol):
    """Define the contract for caching repository responses by ``owner/repo``."""

    def get(self, repo_key: str) -> dict[str, object] | None:
        """Return the cached payload, or ``None`` when missing or expired."""

    def set(self, repo_key: str, payload: dict[str, object]) -> None:
        """Store a payload, replacing any previous entry."""

    def clear(self) -> None:
        """Remove all entries."""

    def size(self) -> int:
        """Return the number of stored entries."""


class MemoryRepoCache:
    """Keep repository payloads in process memory with bounded size.

    The oldest entry is evicted first once ``max_entries`` is reached.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime.
            max_entries: Maximum number of stored entries.
            clock: Time source in seconds.

        Raises:
            ValueError: If ``max_entries`` is not greater than zero.
        """
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, dict[str, object]]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, repo_key: str) -> dict[str, object] | None:
        with self._lock:
            entry = self._entries.get(repo_key)
            if entry is None:
                return None
            stored_at, payload = entry
            if self._clock() - stored_at >= self._ttl_seconds:
                del self._entries[repo_key]
                return None
            return payload

    def set(self, repo_key: str, payload: dict[str, object]) -> None:
        with self._lock:
            self._entries.pop(repo_key, None)
            while len(self._entries) >= self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.info(f"Evicted repository cache entry (repo={evicted})")
            self._entries[repo_key] = (self._clock(), payload)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)
