from __future__ import annotations

import threading
from collections import OrderedDict

from ..recommendations.config import DEFAULT_RANKING_CONFIG


class DiversityTracker:
    """
    Bounded FIFO of recently shown post ids, with the creator of each.

    Every read and write holds the lock; ranking reads it from request
    threads while mark_as_shown evicts.
    """

    def __init__(self, max_size: int = DEFAULT_RANKING_CONFIG.diversity_window) -> None:
        self.max_size = max_size
        self._shown: OrderedDict[str, str | None] = OrderedDict()
        self._lock = threading.Lock()

    def mark_as_shown(self, post_id: str, creator_id: str | None = None) -> None:
        with self._lock:
            if post_id in self._shown:
                return
            self._shown[post_id] = creator_id
            while len(self._shown) > self.max_size:
                self._shown.popitem(last=False)

    def contains(self, post_id: str) -> bool:
        with self._lock:
            return post_id in self._shown

    def creator_count(self, creator_id: str) -> int:
        """Number of tracked posts by *creator_id*."""
        with self._lock:
            return sum(1 for c in self._shown.values() if c == creator_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._shown)
