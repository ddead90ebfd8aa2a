from __future__ import annotations

from pydantic import BaseModel, Field

from ..posts.models import DietTag, MealType


class FoodPreferences(BaseModel):
    """Vendor-scoring half of the profile."""

    favorite_cuisines: list[str] = Field(default_factory=list)
    preferred_price_level: int = Field(default=2, ge=1, le=4)
    dietary_tags: list[str] = Field(default_factory=list)
    avg_order_value: float = Field(default=15.0, ge=0.0)


class UserPreferences(BaseModel):
    """Feed half of the profile, learned from liked posts."""

    favorite_diet_tags: list[DietTag] = Field(default_factory=list)
    favorite_location: str = ""
    preferred_meal_types: list[MealType] = Field(default_factory=list)
    favorite_creators: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.favorite_diet_tags
            or self.favorite_location
            or self.preferred_meal_types
            or self.favorite_creators
        )

    def absorb(self, other: UserPreferences) -> None:
        """Fold *other*'s signals in; lists only grow, location is first-write-wins."""
        for tag in other.favorite_diet_tags:
            if tag not in self.favorite_diet_tags:
                self.favorite_diet_tags.append(tag)
        if not self.favorite_location:
            self.favorite_location = other.favorite_location
        for meal_type in other.preferred_meal_types:
            if meal_type not in self.preferred_meal_types:
                self.preferred_meal_types.append(meal_type)
        for creator in other.favorite_creators:
            if creator not in self.favorite_creators:
                self.favorite_creators.append(creator)


class PreferenceProfile(BaseModel):
    food: FoodPreferences = Field(default_factory=FoodPreferences)
    feed: UserPreferences = Field(default_factory=UserPreferences)
