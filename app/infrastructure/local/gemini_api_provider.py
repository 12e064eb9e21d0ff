"""
Gemini API provider.

Uses the google-genai SDK with an API key (no GCP project required).
"""

from typing import Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai.types import Content, GenerateContentConfig, Part

from app.core.config import get_settings
from app.core.exceptions import LLMError, OverloadError, is_overload_error
from app.interfaces.llm_provider import ILLMProvider, LLMMessage

OVERLOAD_STATUS_CODES = {429, 503}


class GeminiAPIProvider(ILLMProvider):
    """Gemini API provider using API Key."""

    def __init__(self, model_name: str, api_key: str | None = None, client=None):
        """
        Initialize Gemini API provider.

        Args:
            model_name: Gemini model name (e.g., "gemini-2.0-flash")
            api_key: Overrides GEMINI_API_KEY from settings
            client: Pre-built genai.Client (tests)
        """
        self._model_name = model_name
        self._settings = get_settings()
        api_key = api_key or self._settings.GEMINI_API_KEY

        if client is None and not api_key:
            raise ValueError(
                "GEMINI_API_KEY is required for Gemini API provider. "
                "Get your API key from https://aistudio.google.com/apikey"
            )
        self._client = client or genai.Client(api_key=api_key)

    async def generate(
        self,
        contents: Sequence[LLMMessage],
        temperature: float = 0.7,
        max_output_tokens: int = 1024,
    ) -> str:
        """Call generateContent and return the first candidate's text."""
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=[
                    Content(role=message.role, parts=[Part(text=message.text)])
                    for message in contents
                ],
                config=GenerateContentConfig(
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                ),
            )
        except genai_errors.APIError as exc:
            detail = f"Gemini API error {exc.code}: {exc.message or exc.status or 'Unknown'}"
            if exc.code in OVERLOAD_STATUS_CODES or is_overload_error(exc):
                raise OverloadError(detail, details={"code": exc.code}) from exc
            raise LLMError(detail, details={"code": exc.code}) from exc

        text = (response.text or "").strip()
        if not text:
            raise LLMError("Gemini API returned no candidate text")
        return text

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"Gemini API ({self._model_name})"
