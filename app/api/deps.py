"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the configured
infrastructure implementations. Long-lived objects (repository, providers,
the weather cache) are built once per process.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status

from app.core.config import get_settings
from app.core.logger import logger
from app.interfaces.chat_repository import IChatRepository
from app.interfaces.llm_provider import ILLMProvider
from app.services.chat_service import ChatService
from app.services.city_extractor import CityResolver
from app.services.generation_service import GenerationPipeline
from app.services.retry import RetryPolicy
from app.services.weather_service import WeatherCache, WeatherGateway


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_chat_repository() -> IChatRepository:
    """Get chat repository instance."""
    from app.infrastructure.local.chat_repository import SqlChatRepository
    return SqlChatRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def build_llm_provider() -> ILLMProvider:
    """
    Get LLM provider instance based on configuration.

    Raises:
        ValueError: The selected provider is not configured
    """
    settings = get_settings()

    if settings.LLM_PROVIDER == "gemini-api":
        from app.infrastructure.local.gemini_api_provider import GeminiAPIProvider
        return GeminiAPIProvider(settings.GEMINI_MODEL)

    elif settings.LLM_PROVIDER == "litellm":
        from app.infrastructure.local.litellm_provider import LiteLLMProvider
        return LiteLLMProvider(settings.LITELLM_MODEL)

    else:
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")


def get_llm_provider() -> ILLMProvider:
    """LLM provider for a request; an unconfigured provider fails the request."""
    try:
        return build_llm_provider()
    except ValueError as e:
        logger.error(f"Text generation is not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Text generation is not configured: {e}",
        )


@lru_cache()
def get_weather_cache() -> WeatherCache:
    """Process-wide weather cache."""
    return WeatherCache(ttl_seconds=get_settings().WEATHER_CACHE_TTL_SECONDS)


@lru_cache()
def get_weather_gateway() -> Optional[WeatherGateway]:
    """Weather gateway, or None when no weather API key is configured."""
    settings = get_settings()
    if not settings.weather_enabled:
        return None
    from app.infrastructure.local.openweather_provider import OpenWeatherProvider
    return WeatherGateway(OpenWeatherProvider(), get_weather_cache())


def get_retry_policy() -> RetryPolicy:
    settings = get_settings()
    return RetryPolicy(
        max_attempts=settings.GENERATION_MAX_ATTEMPTS,
        base_delay=settings.GENERATION_BASE_DELAY_SECONDS,
        max_jitter=settings.GENERATION_MAX_JITTER_SECONDS,
    )


# ===========================================
# Services
# ===========================================


def get_chat_service(
    chat_repo: IChatRepository = Depends(get_chat_repository),
    llm_provider: ILLMProvider = Depends(get_llm_provider),
    weather_gateway: Optional[WeatherGateway] = Depends(get_weather_gateway),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
) -> ChatService:
    """Chat service for turns that need text generation."""
    settings = get_settings()
    return ChatService(
        chat_repo=chat_repo,
        generation=GenerationPipeline(
            llm_provider,
            retry_policy=retry_policy,
            history_limit=settings.HISTORY_PROMPT_LIMIT,
            temperature=settings.GENERATION_TEMPERATURE,
            max_output_tokens=settings.GENERATION_MAX_OUTPUT_TOKENS,
        ),
        city_resolver=CityResolver(
            llm_provider,
            retry_policy=retry_policy,
            enabled=settings.CITY_CLASSIFIER_ENABLED,
        ),
        weather_gateway=weather_gateway,
        history_fetch_limit=settings.HISTORY_FETCH_LIMIT,
        request_timeout=settings.REQUEST_TIMEOUT_SECONDS,
        session_namer=llm_provider if settings.AUTO_SESSION_NAMES else None,
    )


def get_session_service(
    chat_repo: IChatRepository = Depends(get_chat_repository),
) -> ChatService:
    """Chat service for session bookkeeping; never touches the LLM."""
    return ChatService(
        chat_repo=chat_repo,
        generation=None,
        city_resolver=CityResolver(),
    )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

WeatherCacheDep = Annotated[WeatherCache, Depends(get_weather_cache)]
WeatherGatewayDep = Annotated[Optional[WeatherGateway], Depends(get_weather_gateway)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
SessionServiceDep = Annotated[ChatService, Depends(get_session_service)]
