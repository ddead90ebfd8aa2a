from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from typing import Any, Callable

from .config import DEFAULT_RANKING_CONFIG
from .models import MealPeriod

logger = logging.getLogger(__name__)


def make_key(
    vendor_ids: list[str], meal_period: MealPeriod, user_id: str | None = None,
) -> str:
    """
    Structured key: the JSON list keeps ``["ab", "c"]`` and ``["a", "bc"]`` apart.

    Entries are per caller; ``None`` is the anonymous caller.
    """
    normalized = json.dumps(
        {"vendor_ids": sorted(vendor_ids), "meal_period": meal_period.value, "user_id": user_id},
        sort_keys=True,
    )
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


class RecommendationCache:
    """
    TTL memo of sorted vendor rankings.

    Entries are served unchanged while younger than the TTL, so vendor
    attribute changes inside that window are not reflected.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_RANKING_CONFIG.cache_ttl_seconds,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, dict[str, Any]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry and self._clock() - entry["created_at"] < self.ttl_seconds:
                self._hits += 1
                return entry["value"]
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = {"value": value, "created_at": self._clock()}

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> tuple[Any, bool]:
        """Return ``(value, hit)``; on a miss *compute* runs outside the lock."""
        cached = self.get(key)
        if cached is not None:
            logger.info("Using cached recommendations for key %s", key)
            return cached, True
        value = compute()
        self.set(key, value)
        return value, False

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Recommendation cache cleared")
