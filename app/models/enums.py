"""
Enum definitions for the application.

These enums are used across models and provide type-safe values.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Author of a stored chat message."""

    USER = "user"
    AI = "ai"


class Theme(str, Enum):
    """
    Assistant persona.

    The theme selects the system prompt sent to the text generation service.
    """

    TRAVEL = "travel"
    FASHION = "fashion"
    SPORTS = "sports"
    AGRICULTURE = "agriculture"
    EVENTS = "events"
    HEALTH = "health"

    @classmethod
    def parse(cls, value: str | None) -> "Theme":
        """Return the matching theme, falling back to travel."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.TRAVEL
