from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable

from ..analytics.store import AnalyticsStore
from ..posts.diversity import DiversityTracker
from ..posts.models import Post
from ..posts.ranking import PostRanker
from ..preferences.models import UserPreferences
from ..preferences.store import PreferenceStore
from .cache import RecommendationCache, make_key
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .context import current_context
from .models import Coordinate, RecommendationContext, RecommendationResult, Vendor
from .vendor_scoring import VendorScorer

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """
    Entry point for both feeds.

    Collaborators are passed in by the caller, which owns their lifetime.
    Scoring itself is pure; the shared state (cache, preference sessions,
    diversity trackers) is guarded by the collaborators' own locks.
    """

    def __init__(
        self,
        preference_store: PreferenceStore,
        scorer: VendorScorer | None = None,
        post_ranker: PostRanker | None = None,
        cache: RecommendationCache | None = None,
        analytics: AnalyticsStore | None = None,
        config: RankingConfig = DEFAULT_RANKING_CONFIG,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.config = config
        self.preference_store = preference_store
        self.scorer = scorer or VendorScorer(config)
        self.post_ranker = post_ranker or PostRanker(config)
        self.cache = cache or RecommendationCache(config.cache_ttl_seconds)
        self.analytics = analytics or AnalyticsStore()
        self._now = now
        self._trackers: dict[str | None, DiversityTracker] = {}
        self._trackers_lock = threading.Lock()

    def tracker_for(self, user_id: str | None) -> DiversityTracker:
        with self._trackers_lock:
            tracker = self._trackers.get(user_id)
            if tracker is None:
                tracker = self._trackers[user_id] = DiversityTracker(self.config.diversity_window)
            return tracker

    # ── Vendor feed ──────────────────────────────────────────────────────

    def generate_recommendations(
        self,
        candidates: list[Vendor],
        user_location: Coordinate,
        context: RecommendationContext | None = None,
        user_id: str | None = None,
    ) -> list[RecommendationResult]:
        start_time = time.time()
        context = context or current_context(self._now().astimezone())
        key = make_key([v.id for v in candidates], context.meal_period, user_id)

        def compute() -> list[RecommendationResult]:
            logger.info(
                "Generating fresh recommendations - %s/%s, %d vendors",
                context.time_of_day.value, context.meal_period.value, len(candidates),
            )
            preferences = self.preference_store.load(user_id)
            return self.scorer.rank(candidates, user_location, context, preferences.food)

        results, cache_hit = self.cache.get_or_compute(key, compute)

        if results:
            logger.info(
                "Returning %d recommendations, top: %s (%.0f%%)",
                len(results), results[0].vendor.name or results[0].vendor.id, results[0].match_score,
            )

        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        self.analytics.record_event("recommendation", {
            "user_id": user_id,
            "meal_period": context.meal_period.value,
            "total_candidates": len(candidates),
            "results_returned": len(results),
            "response_time_ms": elapsed_ms,
            "cache_hit": cache_hit,
        })
        return results

    def clear_cache(self) -> None:
        self.cache.clear()

    def close(self) -> None:
        self.preference_store.close()

    # ── Social feed ──────────────────────────────────────────────────────

    def feed_preferences(self, user_id: str | None) -> UserPreferences | None:
        """Learned feed preferences, or None while nothing has been learned."""
        feed = self.preference_store.load(user_id).feed
        return None if feed.is_empty() else feed

    def score_posts(
        self, candidates: list[Post], user_id: str | None = None,
    ) -> list[tuple[Post, float]]:
        if not candidates:
            return []
        scored = self.post_ranker.rank(
            candidates,
            self.feed_preferences(user_id),
            self.tracker_for(user_id),
            self._now(),
        )
        self.analytics.record_event("post_ranking", {
            "user_id": user_id,
            "post_count": len(candidates),
        })
        return scored

    def rank_posts(self, candidates: list[Post], user_id: str | None = None) -> list[Post]:
        return [post for post, _ in self.score_posts(candidates, user_id)]

    def mark_as_shown(
        self, post_id: str, creator_id: str | None = None, user_id: str | None = None,
    ) -> None:
        self.tracker_for(user_id).mark_as_shown(post_id, creator_id)

    def update_preferences(
        self, liked_post: Post, user_id: str | None = None,
    ) -> UserPreferences:
        learned = self.preference_store.learn(user_id, liked_post)
        self.analytics.record_event("preference_update", {
            "user_id": user_id,
            "post_id": liked_post.id,
        })
        return learned
