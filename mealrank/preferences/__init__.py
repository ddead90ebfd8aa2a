"""
Personalization profiles.

Responsibilities:
- Load per-user profiles from the persistence collaborator with a bounded wait.
- Learn feed preferences from liked posts.
"""
