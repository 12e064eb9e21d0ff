"""API routers."""

from app.api import chat, sessions, weather

__all__ = [
    "chat",
    "sessions",
    "weather",
]
