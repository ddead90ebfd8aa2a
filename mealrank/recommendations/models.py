from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class VendorCategory(str, Enum):
    restaurants = "restaurants"
    cafes = "cafes"
    groceries = "groceries"
    desserts = "desserts"
    alcohol = "alcohol"
    convenience = "convenience"


class BadgeType(str, Enum):
    best_in_area = "best_in_area"
    come_once_in_a_while = "come_once_in_a_while"
    lucky_to_eat = "lucky_to_eat"
    new = "new"
    trending = "trending"
    hidden_gem = "hidden_gem"


class VendorBadge(BaseModel):
    type: BadgeType
    title: str | None = None


class FriendVisit(BaseModel):
    friend_name: str
    days_ago: int = Field(default=0, ge=0)


class FriendsActivity(BaseModel):
    total_friends_loved: int = Field(default=0, ge=0)
    recent_visits: list[FriendVisit] = Field(default_factory=list)


class Vendor(BaseModel):
    """A venue candidate. Owned by the vendor repository, read-only here."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    category: VendorCategory = VendorCategory.restaurants
    cuisine: str | None = None
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)
    price_range: str = Field(default="$$", pattern=r"^\${1,4}$")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    address: str = ""
    is_open: bool = True
    delivery_fee: float = Field(default=0.0, ge=0.0)
    delivery_time: str = ""
    tags: list[str] = Field(default_factory=list)
    badges: list[VendorBadge] | None = None
    friends_activity: FriendsActivity | None = None

    @property
    def price_level(self) -> int:
        return len(self.price_range)


class TimeOfDay(str, Enum):
    morning = "morning"
    afternoon = "afternoon"
    evening = "evening"
    night = "night"


class MealPeriod(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    late_night = "late_night"


class WeatherCondition(str, Enum):
    sunny = "sunny"
    rainy = "rainy"
    cold = "cold"
    hot = "hot"


class RecommendationContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    time_of_day: TimeOfDay
    meal_period: MealPeriod
    weather: WeatherCondition | None = None


class ScoreBreakdown(BaseModel):
    total: float
    personalization: float
    quality: float
    proximity: float
    context: float
    social: float
    freshness: float
    business: float


class RecommendationResult(BaseModel):
    vendor: Vendor
    match_score: float
    distance_meters: float
    distance: str
    walking_minutes: int
    walking_time: str
    match_reason: str
    social_proof: list[str] = Field(default_factory=list)
    score_breakdown: ScoreBreakdown


class RecommendationRequest(BaseModel):
    candidates: list[Vendor] = Field(default_factory=list)
    user_location: Coordinate
    context: RecommendationContext | None = Field(
        default=None, description="Defaults to the context derived from the server clock"
    )


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationResult]
    total_candidates: int
    context: RecommendationContext
