"""Service module exports."""

from . import demo_seed, habits, insights, profiles, tracking

__all__ = [
    "demo_seed",
    "habits",
    "insights",
    "profiles",
    "tracking",
]
