"""
Time-bounded memoization of AI enrichment results.

Key: sha256 fingerprint of (entry text, extracted signals). Entries older
than the TTL are never returned (cachetools checks expiry on every access)
and are purged by sweep(), which the app runs every TTL interval.

All access goes through one lock, so concurrent enrichment tasks (asyncio or
threads) can read and write independent keys safely. A sweep holds the lock
only for its own single pass over the store.
"""

from __future__ import annotations

import hashlib
import threading
import time
from collections.abc import Callable
from dataclasses import replace

from cachetools import TTLCache

from journalq.config import ENRICHMENT_CACHE_MAX_ENTRIES, ENRICHMENT_CACHE_TTL_SECONDS
from journalq.journal.models import EnrichedAnalysis, Metrics
from journalq.observability.telemetry import counter, log_event


class EnrichmentCache:
    """TTL cache for EnrichedAnalysis values, safe under concurrent use."""

    def __init__(
        self,
        ttl_seconds: float = ENRICHMENT_CACHE_TTL_SECONDS,
        maxsize: int = ENRICHMENT_CACHE_MAX_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
        name: str = "enrichment",
    ) -> None:
        """
        Args:
            ttl_seconds: Lifetime of an entry (default 30 minutes)
            maxsize: Upper bound on stored entries; oldest evicted first
            timer: Monotonic clock in seconds (injectable for tests)
            name: Cache name used in telemetry counters
        """
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._store: TTLCache[str, EnrichedAnalysis] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds, timer=timer
        )
        self._lock = threading.Lock()

    @staticmethod
    def make_key(text: str, metrics: Metrics) -> str:
        """
        Stable fingerprint of entry text plus extracted signals.

        The extraction instant is excluded so the same text maps to the same key.

        Side Effects:
            None (pure function)
        """
        combined = f"{text}::{metrics.fingerprint()}"
        return hashlib.sha256(combined.encode("utf-8")).hexdigest()

    def get(self, key: str) -> EnrichedAnalysis | None:
        """Return the stored analysis if younger than the TTL, else None."""
        with self._lock:
            value = self._store.get(key)

        if value is None:
            counter(f"cache.{self.name}.miss")
            return None

        counter(f"cache.{self.name}.hit")
        return value

    def put(self, key: str, analysis: EnrichedAnalysis) -> None:
        """
        Store an analysis; the cached flag is never persisted.

        Side Effects:
            - Writes to the in-memory store
            - Increments telemetry counter (cache.{name}.write)
        """
        stored = replace(analysis, cached=False) if analysis.cached else analysis
        with self._lock:
            self._store[key] = stored
        counter(f"cache.{self.name}.write")

    def sweep(self) -> int:
        """
        Purge every entry older than the TTL.

        Returns:
            Number of entries removed

        Side Effects:
            - Deletes expired entries from the store
            - Writes telemetry event with the removed count
        """
        with self._lock:
            expired = self._store.expire()
        removed = len(expired) if expired else 0
        if removed:
            counter(f"cache.{self.name}.expired", removed)
        log_event("cache.swept", cache=self.name, removed=removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            count = len(self._store)
            self._store.clear()
        log_event("cache.cleared", cache=self.name, count=count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._store
