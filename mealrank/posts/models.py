from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"
    meal_prep = "meal_prep"


class DietTag(str, Enum):
    healthy = "healthy"
    high_protein = "high_protein"
    low_carb = "low_carb"
    vegan = "vegan"
    vegetarian = "vegetarian"
    gluten_free = "gluten_free"
    keto = "keto"
    paleo = "paleo"
    wholesome = "wholesome"
    balanced = "balanced"


class Post(BaseModel):
    """A user-generated meal post. Owned by the post repository, read-only here."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    user_name: str = ""
    timestamp: datetime
    location: str = ""
    restaurant_name: str | None = None
    meal_type: MealType
    food_photos: list[str] = Field(default_factory=list)
    notes: str = ""
    diet_tags: list[DietTag] = Field(default_factory=list)
    likes: int = Field(default=0, ge=0)
    comments: int = Field(default=0, ge=0)
    bookmarks: int = Field(default=0, ge=0)
    view_count: int | None = Field(default=None, ge=0)


class PostScoreBreakdown(BaseModel):
    total: float
    engagement: float
    freshness: float
    affinity: float
    diversity: float
    quality: float


class RankPostsRequest(BaseModel):
    posts: list[Post] = Field(default_factory=list)


class RankedPost(BaseModel):
    post: Post
    score: float


class RankPostsResponse(BaseModel):
    posts: list[RankedPost]


class MarkShownRequest(BaseModel):
    creator_id: str | None = None


class EngagementType(str, Enum):
    view = "view"
    like = "like"
    unlike = "unlike"
    comment = "comment"
    share = "share"
    save = "save"


class EngagementRequest(BaseModel):
    type: EngagementType
    duration_seconds: float | None = Field(default=None, ge=0.0)
