from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from mealrank.posts.diversity import DiversityTracker
from mealrank.posts.models import DietTag, MealType, Post
from mealrank.posts.ranking import (
    POST_WEIGHTS,
    PostRanker,
    affinity_score,
    engagement_score,
    freshness_score,
    quality_score,
)
from mealrank.preferences.models import UserPreferences

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _post(**overrides) -> Post:
    fields = {
        "id": "p1",
        "user_id": "alice",
        "timestamp": NOW,
        "location": "East Village, NYC",
        "meal_type": MealType.lunch,
        "diet_tags": [DietTag.vegan],
        "food_photos": ["a.jpg"],
        "notes": "",
        "likes": 0,
        "comments": 0,
        "bookmarks": 0,
        "view_count": 1,
    }
    fields.update(overrides)
    return Post(**fields)


def test_weights_sum_to_one():
    assert math.isclose(sum(POST_WEIGHTS.values()), 1.0, abs_tol=1e-9)


# ── Components ───────────────────────────────────────────────────────────


def test_engagement_weights_comments_and_bookmarks():
    likes_only = engagement_score(_post(likes=3, view_count=100))
    comment = engagement_score(_post(comments=1, view_count=100))
    assert likes_only == pytest.approx(comment)
    assert engagement_score(_post(bookmarks=1, view_count=100)) > comment


def test_engagement_is_capped():
    assert engagement_score(_post(likes=10_000, view_count=1)) == 1.0


def test_engagement_missing_view_count_counts_as_one():
    assert engagement_score(_post(likes=1, view_count=None)) == engagement_score(_post(likes=1, view_count=1))
    assert engagement_score(_post(likes=1, view_count=0)) == engagement_score(_post(likes=1, view_count=1))


def test_freshness_halves_after_a_day():
    assert freshness_score(_post(timestamp=NOW), NOW) == 1.0
    assert freshness_score(_post(timestamp=NOW - timedelta(hours=24)), NOW) == pytest.approx(0.5)


def test_freshness_treats_future_posts_as_new():
    assert freshness_score(_post(timestamp=NOW + timedelta(hours=3)), NOW) == 1.0


def test_affinity_without_preferences_is_neutral():
    assert affinity_score(_post(), None) == 0.5


def test_affinity_components():
    prefs = UserPreferences(
        favorite_diet_tags=[DietTag.vegan, DietTag.keto],
        favorite_location="East Village",
        preferred_meal_types=[MealType.lunch],
        favorite_creators=["alice"],
    )
    assert affinity_score(_post(), prefs) == pytest.approx(0.2 + 0.3 + 0.2 + 0.1)


def test_affinity_is_capped():
    prefs = UserPreferences(
        favorite_diet_tags=[DietTag.vegan],
        favorite_location="East Village",
        preferred_meal_types=[MealType.lunch],
        favorite_creators=["alice"],
    )
    assert affinity_score(_post(), prefs) == pytest.approx(1.0)
    assert affinity_score(_post(), prefs) <= 1.0


def test_affinity_no_overlap_is_zero():
    prefs = UserPreferences(favorite_diet_tags=[DietTag.keto], preferred_meal_types=[MealType.dinner])
    assert affinity_score(_post(), prefs) == 0.0


def test_quality_bonuses():
    assert quality_score(_post(location="", diet_tags=[], food_photos=[])) == 0.0
    full = _post(food_photos=["a.jpg", "b.jpg"], notes="x" * 21)
    assert quality_score(full) == pytest.approx(1.0)
    assert quality_score(_post(notes="x" * 20, location="", diet_tags=[])) == 0.0


def test_diversity_penalises_exact_repeats():
    ranker = PostRanker()
    tracker = DiversityTracker()
    assert ranker.diversity_score(_post(), tracker) == 1.0
    tracker.mark_as_shown("p1")
    assert ranker.diversity_score(_post(), tracker) == 0.2


def test_diversity_penalises_repetitive_creator():
    ranker = PostRanker()
    tracker = DiversityTracker()
    for i in range(3):
        tracker.mark_as_shown(f"old{i}", creator_id="alice")
    assert ranker.diversity_score(_post(), tracker) == 0.6
    assert ranker.diversity_score(_post(user_id="bob"), tracker) == 1.0


# ── Scenario & ordering ──────────────────────────────────────────────────


def test_scenario_engaged_post_beats_silent_one():
    ranker = PostRanker()
    tracker = DiversityTracker()
    silent = ranker.breakdown(_post(), None, tracker, NOW)
    assert silent.engagement == 0.0
    assert silent.freshness == pytest.approx(1.0)

    engaged = ranker.breakdown(
        _post(id="p2", bookmarks=10, view_count=20, timestamp=NOW - timedelta(hours=1)),
        None, tracker, NOW,
    )
    assert engaged.engagement > silent.engagement
    assert engaged.freshness > 0.95


def test_total_is_weighted_sum():
    ranker = PostRanker()
    b = ranker.breakdown(_post(likes=5, view_count=50), None, DiversityTracker(), NOW)
    expected = sum(POST_WEIGHTS[k] * getattr(b, k) for k in POST_WEIGHTS)
    assert b.total == pytest.approx(expected)


def test_rank_is_stable_for_equal_scores():
    ranker = PostRanker()
    posts = [_post(id="a"), _post(id="b"), _post(id="c")]
    ranked = ranker.rank(posts, None, DiversityTracker(), NOW)
    assert [p.id for p, _ in ranked] == ["a", "b", "c"]
    ranked = ranker.rank(list(reversed(posts)), None, DiversityTracker(), NOW)
    assert [p.id for p, _ in ranked] == ["c", "b", "a"]


def test_rank_orders_by_score():
    ranker = PostRanker()
    tracker = DiversityTracker()
    tracker.mark_as_shown("seen")
    posts = [
        _post(id="old", timestamp=NOW - timedelta(days=10)),
        _post(id="seen"),
        _post(id="viral", likes=50, comments=10, view_count=100),
    ]
    ranked = ranker.rank(posts, None, tracker, NOW)
    assert [p.id for p, _ in ranked] == ["viral", "seen", "old"]
