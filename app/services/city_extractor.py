"""
City extraction from free text.

extract_city() is a pure regex heuristic. CityResolver puts an LLM classifier
in front of it and falls back to the heuristic whenever the classifier fails.
"""

from __future__ import annotations

import re
from typing import Optional

from app.core.logger import logger
from app.interfaces.llm_provider import ILLMProvider, LLMMessage
from app.services.retry import RetryPolicy, run_with_retry

# Words that stop a city capture: "weather in Paris today", "Paris for the weekend"
_STOP = (
    r"(?:instead|too|again|still|today|tonight|tomorrow|now|this|next|right|please"
    r"|for|during|on|with|over|until|later)"
)
_END = rf"(?=\s+{_STOP}\b|\s*[?.!,;]|\s*$)"
_NAME = r"([A-Za-z][A-Za-z\s'\-]*?)"
_PROPER_NAME = r"([A-Z][A-Za-z'\-]*(?:\s+[A-Z][A-Za-z'\-]*)*)"

CITY_PATTERNS: tuple[re.Pattern, ...] = (
    # "weather in Paris", "forecast for New York", "temperature at Osaka"
    re.compile(
        rf"\b(?:weather|forecast|temperature|climate|conditions)\s+(?:like\s+)?(?:in|for|at|of)\s+{_NAME}{_END}",
        re.IGNORECASE,
    ),
    # "what about Berlin instead?", "how about Rome"
    re.compile(rf"\b(?:what|how)\s+about\s+{_NAME}{_END}", re.IGNORECASE),
    # "I'm flying to Lisbon next week", "staying in Kyoto"
    re.compile(
        rf"\b(?:[Ii]n|[Aa]t|[Tt]o|[Nn]ear|[Vv]isiting|[Aa]round)\s+{_PROPER_NAME}"
    ),
    # "Tokyo weather forecast", "London forecast"
    re.compile(
        rf"^\s*{_PROPER_NAME}(?:'s)?\s+(?:[Ww]eather|[Ff]orecast|[Tt]emperature)\b"
    ),
    # a bare "Paris?" or "New York"
    re.compile(rf"^\s*{_PROPER_NAME}\s*[?.!]?\s*$"),
)

ANAPHORA = re.compile(r"\b(?:there|here|still|again|too)\b", re.IGNORECASE)
OVERRIDE = re.compile(r"\binstead\b", re.IGNORECASE)

# Captures that look like places but are not
NOT_CITIES = {
    "the", "it", "that", "this", "there", "here", "today", "tomorrow", "tonight",
    "the weather", "weather", "the city", "my city", "my area", "the area",
    "general", "the morning", "the afternoon", "the evening", "the weekend",
    "the moment", "the world", "you", "me", "home", "i", "a", "an",
    "hello", "hey", "thanks", "thank you", "yes", "okay", "sure", "great", "cool",
}

PREVIOUS_CITY = "PREVIOUS_CITY"
NO_CITY = "NO_CITY"


def is_plausible_city(candidate: str) -> bool:
    """Length strictly between 2 and 50, no digits, not a filler phrase."""
    if not (2 < len(candidate) < 50):
        return False
    if any(ch.isdigit() for ch in candidate):
        return False
    return candidate.lower() not in NOT_CITIES


def _clean(candidate: str) -> str:
    candidate = re.sub(r"^(?:the\s+city\s+of|city\s+of)\s+", "", candidate.strip(), flags=re.IGNORECASE)
    return candidate.strip(" '-")


def refers_to_previous(message: str) -> bool:
    """The message points back at the earlier location and does not override it."""
    return bool(ANAPHORA.search(message)) and not OVERRIDE.search(message)


def extract_city(message: Optional[str], previous_city: Optional[str] = None) -> Optional[str]:
    """
    Infer a city name from a user message.

    Returns previous_city for anaphoric follow-ups ("is it still raining
    there?") and when nothing else matches; None means no location signal.
    """
    if not message:
        return previous_city or None

    if previous_city and refers_to_previous(message):
        return previous_city

    for pattern in CITY_PATTERNS:
        for match in pattern.finditer(message):
            candidate = _clean(match.group(1))
            if is_plausible_city(candidate):
                return candidate

    return previous_city or None


CLASSIFIER_PROMPT = """You extract locations for a weather assistant.
Read the user's message and answer with exactly one line:
- the city name, if the message names a city or place (e.g. "Paris");
- {previous} if the message refers back to the previously discussed city{previous_hint};
- {none} if the message does not refer to any location.
Answer with nothing else.

Message: "{message}"
"""


class CityResolver:
    """
    Two-tier city extraction.

    Primary: ask the LLM to classify the message. Secondary: the regex
    heuristic, used when the classifier is disabled or fails after retries.
    """

    def __init__(
        self,
        llm_provider: Optional[ILLMProvider] = None,
        retry_policy: Optional[RetryPolicy] = None,
        enabled: bool = False,
    ):
        self._llm = llm_provider
        self._policy = retry_policy or RetryPolicy()
        self._enabled = enabled and llm_provider is not None

    async def resolve(self, message: str, previous_city: Optional[str] = None) -> Optional[str]:
        if self._enabled:
            try:
                return await self._classify(message, previous_city)
            except Exception as exc:
                logger.warning(f"City classifier failed, using regex heuristics: {exc}")
        return extract_city(message, previous_city)

    async def _classify(self, message: str, previous_city: Optional[str]) -> Optional[str]:
        prompt = CLASSIFIER_PROMPT.format(
            previous=PREVIOUS_CITY,
            previous_hint=f" ({previous_city})" if previous_city else "",
            none=NO_CITY,
            message=message.replace('"', "'"),
        )

        async def call() -> str:
            return await self._llm.generate(
                [LLMMessage(role="user", text=prompt)],
                temperature=0.0,
                max_output_tokens=20,
            )

        answer = (await run_with_retry(call, self._policy)).strip().splitlines()[0]
        answer = answer.strip().strip("\"'.")

        if answer.upper() == NO_CITY:
            return None
        if answer.upper() == PREVIOUS_CITY:
            return previous_city or None
        if not is_plausible_city(answer):
            raise ValueError(f"Classifier answer is not a city: {answer!r}")
        return answer
