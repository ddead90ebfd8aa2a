from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from ..preferences.models import UserPreferences
from ..recommendations.config import DEFAULT_RANKING_CONFIG, RankingConfig
from .diversity import DiversityTracker
from .models import Post, PostScoreBreakdown

logger = logging.getLogger(__name__)

POST_WEIGHTS: dict[str, float] = {
    "engagement": 0.35,
    "freshness": 0.25,
    "affinity": 0.20,
    "diversity": 0.15,
    "quality": 0.05,
}

NEUTRAL_AFFINITY = 0.5
REPEAT_PENALTY = 0.2
CREATOR_REPEAT_PENALTY = 0.6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def engagement_score(post: Post) -> float:
    # comments and saves signal deeper interest than likes
    weighted = post.likes * 1 + post.comments * 3 + post.bookmarks * 4
    views = max(post.view_count if post.view_count is not None else 1, 1)
    rate = weighted / views
    return min(math.log10(1 + rate * 100) / 2, 1.0)


def freshness_score(post: Post, now: datetime) -> float:
    timestamp = post.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    hours = max((now - timestamp).total_seconds() / 3600, 0.0)
    return 1.0 / (1.0 + hours / 24.0)


def affinity_score(post: Post, prefs: UserPreferences | None) -> float:
    if prefs is None:
        return NEUTRAL_AFFINITY

    score = 0.0

    matching = [tag for tag in post.diet_tags if tag in prefs.favorite_diet_tags]
    if matching:
        score += 0.4 * (len(matching) / max(len(prefs.favorite_diet_tags), 1))

    if prefs.favorite_location and prefs.favorite_location in post.location:
        score += 0.3

    if post.meal_type in prefs.preferred_meal_types:
        score += 0.2

    if post.user_id in prefs.favorite_creators:
        score += 0.1

    return min(score, 1.0)


def quality_score(post: Post) -> float:
    score = 0.0
    if len(post.food_photos) > 1:
        score += 0.3
    if len(post.notes) > 20:
        score += 0.3
    if post.location:
        score += 0.2
    if post.diet_tags:
        score += 0.2
    return score


class PostRanker:
    """Five-signal feed ranker. Scores are comparable, not normalised."""

    def __init__(self, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> None:
        self.config = config

    def diversity_score(self, post: Post, tracker: DiversityTracker) -> float:
        if tracker.contains(post.id):
            return REPEAT_PENALTY
        if tracker.creator_count(post.user_id) > self.config.creator_repeat_threshold:
            return CREATOR_REPEAT_PENALTY
        return 1.0

    def breakdown(
        self,
        post: Post,
        preferences: UserPreferences | None,
        tracker: DiversityTracker,
        now: datetime | None = None,
    ) -> PostScoreBreakdown:
        components = {
            "engagement": engagement_score(post),
            "freshness": freshness_score(post, now or _utcnow()),
            "affinity": affinity_score(post, preferences),
            "diversity": self.diversity_score(post, tracker),
            "quality": quality_score(post),
        }
        total = sum(POST_WEIGHTS[name] * value for name, value in components.items())
        return PostScoreBreakdown(total=total, **components)

    def score(
        self,
        post: Post,
        preferences: UserPreferences | None,
        tracker: DiversityTracker,
        now: datetime | None = None,
    ) -> float:
        return self.breakdown(post, preferences, tracker, now).total

    def rank(
        self,
        posts: list[Post],
        preferences: UserPreferences | None,
        tracker: DiversityTracker,
        now: datetime | None = None,
    ) -> list[tuple[Post, float]]:
        """Return ``(post, score)`` pairs, highest first, ties in input order."""
        now = now or _utcnow()
        scored = [(post, self.score(post, preferences, tracker, now)) for post in posts]
        scored.sort(key=lambda item: item[1], reverse=True)
        if scored:
            logger.info("Ranked %d posts - top score %.3f", len(scored), scored[0][1])
        return scored
