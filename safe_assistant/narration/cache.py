"""
safe_assistant/narration/cache.py - Explanation cache with TTL

Caches admitted explanations (generated or fallback) keyed by a fingerprint
of non-sensitive decision metadata. Never keyed on user text or payloads.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from safe_assistant.gateway.models import DecisionKind

from .schemas import ExplanationResult

logger = logging.getLogger("narration.cache")

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 24 * 60 * 60


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its lifetime window (epoch seconds)."""

    value: T
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


def explanation_cache_key(
    scenario_id: str,
    kind: DecisionKind,
    deny_code: Optional[str] = None,
    action_type: Optional[str] = None,
    target_system: Optional[str] = None,
    drift_rejected: bool = False,
) -> str:
    """
    Build a cache key from decision metadata.

    Args:
        scenario_id: Scenario identifier
        kind: Narrated decision kind
        deny_code: Deny code, if any
        action_type: Proposed action type
        target_system: Proposed target system
        drift_rejected: Whether drift was previously detected

    Returns:
        First 24 hex chars of the SHA-256 of the joined fields
    """
    raw = "|".join([
        scenario_id,
        kind.value,
        deny_code or "",
        action_type or "",
        target_system or "",
        str(bool(drift_rejected)).lower(),
    ])
    return hashlib.sha256(raw.encode()).hexdigest()[:24]


def _text_hash(text: str) -> str:
    return hashlib.sha256(text.encode()).hexdigest()[:12]


class ExplanationCache:
    """
    In-memory, process-lifetime explanation cache.

    Expired entries are evicted lazily on lookup. Concurrent writers for
    the same key are not coordinated; the last write wins.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of each entry (24 hours by default)
            enabled: When False, get() always misses and set() is a no-op
            clock: Time source in epoch seconds
        """
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self._clock = clock
        self._cache: Dict[str, CacheEntry[ExplanationResult]] = {}
        self._stats = {
            "hits": 0,
            "misses": 0,
            "evictions": 0,
        }

    def get(self, key: str) -> Optional[ExplanationResult]:
        """
        Get a cached explanation if present and not expired.

        Returns:
            Cached ExplanationResult or None if absent/expired/disabled
        """
        if not self.enabled:
            return None

        entry = self._cache.get(key)
        if entry is None:
            self._stats["misses"] += 1
            return None

        if entry.is_expired(self._clock()):
            del self._cache[key]
            self._stats["misses"] += 1
            self._stats["evictions"] += 1
            logger.debug(f"Cache entry expired: {key}")
            return None

        self._stats["hits"] += 1
        logger.debug(f"Cache hit: {key}")
        return entry.value

    def set(self, key: str, result: ExplanationResult) -> None:
        """Store an explanation under ``key`` for the configured TTL."""
        if not self.enabled:
            return

        now = self._clock()
        self._cache[key] = CacheEntry(
            value=result,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        logger.info(
            f"SET explanation key={key} hash={_text_hash(result.text)} "
            f"len={len(result.text)} source={result.source.value}"
        )

    def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._cache)
        self._cache.clear()
        logger.info(f"Cleared {count} cache entries")

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with hits, misses, evictions, entries, hit_rate
        """
        total = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / total if total > 0 else 0.0

        return {
            "hits": self._stats["hits"],
            "misses": self._stats["misses"],
            "evictions": self._stats["evictions"],
            "entries": len(self._cache),
            "hit_rate": round(hit_rate, 3),
        }
