"""Ranking & recommendation core for the Campus Meals discovery app."""
