"""Abstract interfaces for infrastructure abstraction."""

from app.interfaces.chat_repository import IChatRepository
from app.interfaces.llm_provider import ILLMProvider, LLMMessage
from app.interfaces.weather_provider import IWeatherProvider

__all__ = [
    "IChatRepository",
    "ILLMProvider",
    "IWeatherProvider",
    "LLMMessage",
]
