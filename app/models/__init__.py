"""Pydantic models (schemas) for the application."""

from app.models.enums import MessageRole, Theme
from app.models.chat import (
    ChatMessage,
    ChatMessageCreate,
    GenerateRequest,
    GenerateResponse,
    MessagesResponse,
    SessionSummary,
)
from app.models.weather import OpenWeatherResponse, WeatherSnapshot

__all__ = [
    # Enums
    "MessageRole",
    "Theme",
    # Chat
    "ChatMessage",
    "ChatMessageCreate",
    "GenerateRequest",
    "GenerateResponse",
    "MessagesResponse",
    "SessionSummary",
    # Weather
    "OpenWeatherResponse",
    "WeatherSnapshot",
]
