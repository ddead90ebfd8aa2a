from __future__ import annotations

import logging
import math

from geopy.distance import geodesic

from ..preferences.models import FoodPreferences
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import (
    BadgeType,
    Coordinate,
    FriendsActivity,
    MealPeriod,
    RecommendationContext,
    RecommendationResult,
    ScoreBreakdown,
    Vendor,
    VendorCategory,
)

logger = logging.getLogger(__name__)

VENDOR_WEIGHTS: dict[str, float] = {
    "personalization": 0.25,
    "quality": 0.20,
    "proximity": 0.15,
    "context": 0.15,
    "social": 0.10,
    "freshness": 0.08,
    "business": 0.07,
}

METERS_PER_MILE = 1609.34


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(value, high))


# ── Optional-field defaults ──────────────────────────────────────────────


def cuisine_or_default(vendor: Vendor) -> str:
    """Cuisine label, or "" when the vendor has none."""
    return vendor.cuisine or ""


def badges_or_default(vendor: Vendor) -> set[BadgeType]:
    return {b.type for b in vendor.badges or []}


def friends_activity_or_default(vendor: Vendor) -> FriendsActivity | None:
    return vendor.friends_activity


def social_proof_names(vendor: Vendor) -> list[str]:
    activity = friends_activity_or_default(vendor)
    return [v.friend_name for v in activity.recent_visits] if activity else []


# ── Components ───────────────────────────────────────────────────────────


def personalization_score(vendor: Vendor, prefs: FoodPreferences) -> float:
    score = 30.0

    cuisine = cuisine_or_default(vendor)
    if cuisine:
        if cuisine in prefs.favorite_cuisines:
            score += 50.0
        else:
            cuisine_lower = cuisine.lower()
            for fav in prefs.favorite_cuisines:
                fav_lower = fav.lower()
                if fav_lower in cuisine_lower or cuisine_lower in fav_lower:
                    score += 25.0
                    break

    price_gap = abs(vendor.price_level - prefs.preferred_price_level)
    if price_gap == 0:
        score += 15.0
    elif price_gap == 1:
        score += 8.0
    else:
        score -= 5.0

    if prefs.dietary_tags:
        score += 5.0

    return _clamp(score)


def quality_score(vendor: Vendor) -> float:
    rating_part = (vendor.rating / 5.0) * 60.0
    # +1 keeps log10 defined for vendors without reviews
    review_part = min(math.log10(vendor.review_count + 1) / 4.0, 1.0) * 40.0
    return _clamp(rating_part + review_part)


def proximity_score(distance_m: float) -> float:
    if distance_m < 200:
        return 100.0
    if distance_m < 500:
        return 90.0
    if distance_m < 1000:
        return 70.0
    if distance_m < 2000:
        return 50.0
    if distance_m < 3000:
        return 30.0
    return 10.0


def context_score(vendor: Vendor, context: RecommendationContext) -> float:
    score = 30.0
    cuisine = cuisine_or_default(vendor).lower()
    is_restaurant = vendor.category == VendorCategory.restaurants

    if context.meal_period == MealPeriod.breakfast:
        if vendor.category == VendorCategory.cafes:
            score += 50.0
        elif "breakfast" in cuisine:
            score += 40.0
        elif "coffee" in cuisine:
            score += 35.0
        elif is_restaurant:
            score += 10.0
    elif context.meal_period == MealPeriod.lunch:
        if is_restaurant:
            score += 40.0
        if "salad" in cuisine or "healthy" in cuisine:
            score += 20.0
    elif context.meal_period == MealPeriod.dinner:
        if is_restaurant:
            score += 50.0
    elif context.meal_period == MealPeriod.late_night:
        if vendor.is_open:
            score += 40.0

    if vendor.category == VendorCategory.groceries:
        score -= 20.0

    return _clamp(score)


def social_score(vendor: Vendor) -> float:
    activity = friends_activity_or_default(vendor)
    if activity is not None:
        return _clamp(min(activity.total_friends_loved * 20.0, 60.0) + 40.0)
    return _clamp(min(vendor.review_count / 100.0, 100.0))


def freshness_score(vendor: Vendor) -> float:
    badges = badges_or_default(vendor)
    if BadgeType.new in badges:
        return 100.0
    if BadgeType.trending in badges:
        return 80.0
    return 50.0


def business_health_score(vendor: Vendor) -> float:
    if not vendor.is_open:
        return 0.0
    score = 50.0 + 30.0
    if vendor.delivery_fee == 0:
        score += 20.0
    return _clamp(score)


def distance_meters(vendor: Vendor, user_location: Coordinate) -> float:
    return geodesic(
        (user_location.latitude, user_location.longitude),
        (vendor.latitude, vendor.longitude),
    ).meters


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{int(meters)} m"
    return f"{meters / METERS_PER_MILE:.1f} mi"


def match_reason(vendor: Vendor, breakdown: ScoreBreakdown) -> str:
    """Pick the highest-priority threshold the score clears."""
    if breakdown.personalization > 70 and vendor.cuisine:
        return f"Matches your {vendor.cuisine.lower()} preferences"
    if breakdown.proximity > 80:
        return "Very close to you"
    if breakdown.quality > 85:
        return "Highly rated by customers"
    if breakdown.social > 70:
        return "Loved by your friends"
    return "Great option for you"


class VendorScorer:
    """Seven-signal vendor scorer producing 0-100 totals."""

    def __init__(self, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> None:
        self.config = config

    def score(
        self,
        vendor: Vendor,
        user_location: Coordinate,
        context: RecommendationContext,
        preferences: FoodPreferences,
        distance_m: float | None = None,
    ) -> ScoreBreakdown:
        if distance_m is None:
            distance_m = distance_meters(vendor, user_location)

        components = {
            "personalization": personalization_score(vendor, preferences),
            "quality": quality_score(vendor),
            "proximity": proximity_score(distance_m),
            "context": context_score(vendor, context),
            "social": social_score(vendor),
            "freshness": freshness_score(vendor),
            "business": business_health_score(vendor),
        }
        total = sum(VENDOR_WEIGHTS[name] * value for name, value in components.items())
        return ScoreBreakdown(total=_clamp(total), **components)

    def rank(
        self,
        vendors: list[Vendor],
        user_location: Coordinate,
        context: RecommendationContext,
        preferences: FoodPreferences,
    ) -> list[RecommendationResult]:
        """Score every candidate and return the top results, best first."""
        scored: list[tuple[Vendor, ScoreBreakdown, float]] = []
        for vendor in vendors:
            meters = distance_meters(vendor, user_location)
            breakdown = self.score(vendor, user_location, context, preferences, meters)
            logger.debug(
                "%s total=%.1f person=%.1f quality=%.1f proximity=%.1f context=%.1f",
                vendor.id, breakdown.total, breakdown.personalization,
                breakdown.quality, breakdown.proximity, breakdown.context,
            )
            scored.append((vendor, breakdown, meters))

        # list.sort is stable: equal totals keep candidate order
        scored.sort(key=lambda item: item[1].total, reverse=True)

        return [
            self._to_result(vendor, breakdown, meters)
            for vendor, breakdown, meters in scored[: self.config.max_recommendations]
        ]

    def _to_result(
        self, vendor: Vendor, breakdown: ScoreBreakdown, meters: float,
    ) -> RecommendationResult:
        walking_minutes = round(meters / self.config.walking_speed_mps / 60)
        return RecommendationResult(
            vendor=vendor,
            match_score=breakdown.total,
            distance_meters=round(meters, 1),
            distance=format_distance(meters),
            walking_minutes=walking_minutes,
            walking_time=f"{walking_minutes} min",
            match_reason=match_reason(vendor, breakdown),
            social_proof=social_proof_names(vendor),
            score_breakdown=breakdown,
        )
