"""
Vendor recommendation pipeline.

Responsibilities:
- Derive the meal-period context from the clock.
- Score candidate vendors on seven weighted signals.
- Cache sorted rankings per candidate set and meal period.
- Orchestrate both feeds behind ``RecommendationEngine``.
"""
