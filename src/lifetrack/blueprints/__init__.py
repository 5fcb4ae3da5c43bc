"""Blueprint exports."""

from . import habits, home

__all__ = [
    "habits",
    "home",
]
