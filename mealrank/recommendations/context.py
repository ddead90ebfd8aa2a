from __future__ import annotations

from datetime import datetime

from .models import MealPeriod, RecommendationContext, TimeOfDay, WeatherCondition


def current_context(
    now: datetime | None = None,
    weather: WeatherCondition | None = None,
) -> RecommendationContext:
    """Bucket the hour of *now* into a time-of-day / meal-period context."""
    hour = (now or datetime.now()).hour

    if 6 <= hour < 12:
        time_of_day, meal_period = TimeOfDay.morning, MealPeriod.breakfast
    elif 12 <= hour < 17:
        time_of_day, meal_period = TimeOfDay.afternoon, MealPeriod.lunch
    elif 17 <= hour < 21:
        time_of_day, meal_period = TimeOfDay.evening, MealPeriod.dinner
    else:
        time_of_day, meal_period = TimeOfDay.night, MealPeriod.late_night

    return RecommendationContext(
        time_of_day=time_of_day,
        meal_period=meal_period,
        weather=weather,
    )
