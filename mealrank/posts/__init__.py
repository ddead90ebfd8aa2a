"""
Social feed ranking.

Responsibilities:
- Score posts on engagement, freshness, affinity, diversity and quality.
- Track recently shown posts to penalise repeats.
"""
