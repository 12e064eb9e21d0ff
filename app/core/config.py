"""
Application configuration using Pydantic Settings.

Values are read once from the environment (or a local .env file) at process start.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./weatherchat.db"

    # ===========================================
    # LLM Configuration
    # ===========================================
    # LLM Provider: "gemini-api" | "litellm"
    # - gemini-api: Gemini API (API Key)
    # - litellm: LiteLLM (OpenAI, Bedrock, etc. with optional custom endpoint)
    LLM_PROVIDER: Literal["gemini-api", "litellm"] = "gemini-api"

    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_API_KEY: str = ""

    LITELLM_MODEL: str = "gpt-4o-mini"
    LITELLM_API_BASE: str = ""
    LITELLM_API_KEY: str = ""

    GENERATION_TEMPERATURE: float = 0.7
    GENERATION_MAX_OUTPUT_TOKENS: int = 1024

    # Retry on overload / rate limiting
    GENERATION_MAX_ATTEMPTS: int = 3
    GENERATION_BASE_DELAY_SECONDS: float = 1.0
    GENERATION_MAX_JITTER_SECONDS: float = 0.5

    # ===========================================
    # Weather
    # ===========================================
    OPENWEATHER_API_KEY: str = ""
    OPENWEATHER_BASE_URL: str = "https://api.openweathermap.org/data/2.5"
    WEATHER_TIMEOUT_SECONDS: float = 10.0
    WEATHER_CACHE_TTL_SECONDS: float = 600.0

    # ===========================================
    # Conversation
    # ===========================================
    HISTORY_FETCH_LIMIT: int = 10
    HISTORY_PROMPT_LIMIT: int = 5
    REQUEST_TIMEOUT_SECONDS: float = 60.0

    # Ask the LLM to classify the city before falling back to regex heuristics
    CITY_CLASSIFIER_ENABLED: bool = False
    # Ask the LLM for a short title when a new session starts
    AUTO_SESSION_NAMES: bool = False

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )
    ALLOWED_ORIGIN_REGEX: str = r"https://.*\.vercel\.app"

    @property
    def weather_enabled(self) -> bool:
        """Weather enrichment is skipped when no API key is configured."""
        return bool(self.OPENWEATHER_API_KEY)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
