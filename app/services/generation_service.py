"""
Generation pipeline.

Builds the themed prompt, calls the text generation service under the retry
policy and falls back to a locally synthesised reply when the service stays
overloaded.

Per call: Pending -> Success | Retrying -> Pending | FailedOverload -> Fallback
| FailedOther -> Error.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from app.core.exceptions import GenerationError, is_overload_error
from app.core.logger import logger
from app.interfaces.llm_provider import ILLMProvider
from app.models.chat import ChatMessage
from app.models.enums import Theme
from app.models.weather import WeatherSnapshot
from app.services.fallback import fallback_reply
from app.services.prompt_builder import DEFAULT_HISTORY_LIMIT, build_contents, build_system_prompt
from app.services.retry import RetryPolicy, run_with_retry
from app.services.text_utils import strip_markdown


@dataclass(frozen=True)
class GenerationResult:
    text: str
    fallback: bool = False
    attempts: int = 1


class GenerationPipeline:
    """Produces the assistant reply for one chat turn."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        retry_policy: Optional[RetryPolicy] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        temperature: float = 0.7,
        max_output_tokens: int = 1024,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[float, float], float] = random.uniform,
    ):
        self._llm = llm_provider
        self._policy = retry_policy or RetryPolicy()
        self._history_limit = history_limit
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._sleep = sleep
        self._rand = rand

    async def generate(
        self,
        message: str,
        theme: Theme | str | None,
        lang: Optional[str],
        weather: Optional[WeatherSnapshot] = None,
        city: Optional[str] = None,
        history: Sequence[ChatMessage] = (),
    ) -> GenerationResult:
        """
        Generate the reply text.

        Raises:
            GenerationError: The service failed with a non-overload error
        """
        system_prompt = build_system_prompt(theme, lang, weather=weather, city=city)
        contents = build_contents(
            message,
            system_prompt,
            history=history,
            history_limit=self._history_limit,
        )

        attempts = 0

        async def call() -> str:
            nonlocal attempts
            attempts += 1
            return await self._llm.generate(
                contents,
                temperature=self._temperature,
                max_output_tokens=self._max_output_tokens,
            )

        try:
            raw = await run_with_retry(call, self._policy, sleep=self._sleep, rand=self._rand)
        except Exception as exc:
            if is_overload_error(exc):
                logger.warning(
                    f"{self._llm.get_model_name()} still overloaded after {attempts} attempts; "
                    "using fallback reply"
                )
                return GenerationResult(
                    text=fallback_reply(weather, city),
                    fallback=True,
                    attempts=attempts,
                )
            logger.error(f"Generation failed on attempt {attempts}: {exc}")
            raise GenerationError(f"Text generation failed: {exc}", attempts=attempts) from exc

        text = strip_markdown(raw)
        if not text:
            raise GenerationError("Text generation returned only formatting", attempts=attempts)
        return GenerationResult(text=text, attempts=attempts)
