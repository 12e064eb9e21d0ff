"""
LiteLLM provider implementation.

Supports OpenAI, Bedrock, and other providers via LiteLLM.
Includes support for custom endpoints (api_base) for proxy servers.
"""

from typing import Any, Optional, Sequence

import litellm

from app.core.config import get_settings
from app.core.exceptions import LLMError, OverloadError, is_overload_error
from app.core.logger import logger
from app.interfaces.llm_provider import ILLMProvider, LLMMessage

# LiteLLM speaks OpenAI roles
_ROLE_MAP = {"user": "user", "model": "assistant"}


class LiteLLMProvider(ILLMProvider):
    """LiteLLM provider with custom endpoint support."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        """
        Initialize LiteLLM provider.

        Args:
            model_name: LiteLLM model identifier (e.g., "gpt-4o-mini")
            api_base: Custom API endpoint URL (optional, for proxy servers)
                     Note: Do NOT include /v1 suffix - LiteLLM adds it automatically
            api_key: Custom API key (optional, overrides default)
        """
        self._model_name = model_name
        self._settings = get_settings()
        self._api_base = api_base or self._settings.LITELLM_API_BASE or None
        self._api_key = api_key or self._settings.LITELLM_API_KEY or None

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        if self._api_base:
            return f"LiteLLM ({self._model_name} @ {self._api_base})"
        return f"LiteLLM ({self._model_name})"

    async def generate(
        self,
        contents: Sequence[LLMMessage],
        temperature: float = 0.7,
        max_output_tokens: int = 1024,
    ) -> str:
        kwargs: dict[str, Any] = {
            "model": self._model_name,
            "messages": [
                {"role": _ROLE_MAP[message.role], "content": message.text}
                for message in contents
            ],
            "temperature": temperature,
            "max_tokens": max_output_tokens,
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key

        try:
            response = await litellm.acompletion(**kwargs)
        except (litellm.RateLimitError, litellm.ServiceUnavailableError) as exc:
            raise OverloadError(f"LiteLLM overloaded: {exc}") from exc
        except Exception as exc:
            logger.warning(f"LiteLLM request failed: {exc}")
            if is_overload_error(exc):
                raise OverloadError(f"LiteLLM overloaded: {exc}") from exc
            raise LLMError(f"LiteLLM request failed: {exc}") from exc

        content = response.choices[0].message.content if response.choices else ""
        text = (content or "").strip()
        if not text:
            raise LLMError("LiteLLM returned an empty response")
        return text
