"""
Chat service.

Runs one chat turn end to end (city, weather, history, generation,
persistence) and the session bookkeeping operations behind the session
endpoints.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Optional

from app.core.exceptions import GenerationError, UpstreamError, ValidationError
from app.core.logger import logger
from app.interfaces.chat_repository import IChatRepository
from app.interfaces.llm_provider import ILLMProvider, LLMMessage
from app.models.chat import (
    ChatMessage,
    ChatMessageCreate,
    GenerateRequest,
    GenerateResponse,
    MessagesResponse,
    SessionSummary,
)
from app.models.enums import MessageRole, Theme
from app.models.weather import WeatherSnapshot
from app.services.city_extractor import CityResolver
from app.services.generation_service import GenerationPipeline
from app.services.weather_service import WeatherGateway
from app.utils.datetime_utils import default_session_name, now_utc, timestamp_session_id

DEFAULT_HISTORY_FETCH_LIMIT = 10
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60.0
SESSION_LIST_LIMIT = 50

SESSION_NAME_PROMPT = (
    "Generate a concise, 4-6 word title based on this message. Make it descriptive "
    "but brief. Focus on the main topic or question. Just return the title, no quotes "
    'or formatting.\n\nMessage: "{message}"'
)


class ChatService:
    """Chat turns and session operations."""

    def __init__(
        self,
        chat_repo: IChatRepository,
        generation: Optional[GenerationPipeline],
        city_resolver: CityResolver,
        weather_gateway: Optional[WeatherGateway] = None,
        history_fetch_limit: int = DEFAULT_HISTORY_FETCH_LIMIT,
        request_timeout: Optional[float] = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        session_namer: Optional[ILLMProvider] = None,
    ):
        self._repo = chat_repo
        self._generation = generation
        self._city_resolver = city_resolver
        self._weather = weather_gateway
        self._history_fetch_limit = history_fetch_limit
        self._request_timeout = request_timeout
        self._session_namer = session_namer

    # ===========================================
    # Chat turn
    # ===========================================

    async def generate_reply(self, request: GenerateRequest) -> GenerateResponse:
        """
        Handle one user message.

        The user message is stored before generation and the assistant message
        after it, so a failed generation leaves only the user's turn.

        Raises:
            GenerationError: Generation failed (or the deadline passed)
        """
        try:
            return await asyncio.wait_for(self._run_turn(request), timeout=self._request_timeout)
        except asyncio.TimeoutError as exc:
            logger.error(f"Chat turn exceeded {self._request_timeout}s")
            raise GenerationError(
                f"Request timed out after {self._request_timeout} seconds",
                details={"timeout": True},
            ) from exc

    async def _run_turn(self, request: GenerateRequest) -> GenerateResponse:
        session_id = request.session_id or timestamp_session_id()

        city = await self._resolve_city(request.message, request.city)
        weather, cached = await self._lookup_weather(city)

        history = []
        if request.session_id:
            history = await self._repo.list_messages(session_id, limit=self._history_fetch_limit)
        session_name = request.session_name or (
            history[-1].session_name if history else await self._name_new_session(request.message)
        )

        user_message = await self._repo.add_message(
            ChatMessageCreate(
                session_id=session_id,
                session_name=session_name,
                role=MessageRole.USER,
                text=request.message,
                lang=request.lang,
                theme=request.theme,
                city=city,
                # Only a fresh fetch is recorded; cache hits reuse an earlier capture
                weather=None if cached else weather,
            )
        )

        result = await self._generation.generate(
            message=request.message,
            theme=request.theme,
            lang=request.lang,
            weather=weather,
            city=city,
            history=history,
        )

        # The reply must sort after the user message even on a coarse clock
        reply_at = max(now_utc(), user_message.created_at + timedelta(microseconds=1))
        await self._repo.add_message(
            ChatMessageCreate(
                session_id=session_id,
                session_name=session_name,
                role=MessageRole.AI,
                text=result.text,
                lang=request.lang,
                theme=request.theme,
                city=city,
                weather=None,
                created_at=reply_at,
            )
        )

        return GenerateResponse(
            output=result.text,
            city=city,
            weather=weather,
            session_id=session_id,
            session_name=session_name,
            theme=request.theme,
            fallback=result.fallback,
        )

    async def _resolve_city(self, message: str, previous_city: Optional[str]) -> Optional[str]:
        try:
            return await self._city_resolver.resolve(message, previous_city=previous_city)
        except Exception as exc:
            logger.warning(f"City extraction failed: {exc}")
            return previous_city

    async def _lookup_weather(self, city: Optional[str]) -> tuple[Optional[WeatherSnapshot], bool]:
        """Weather for the prompt, and whether it came from the cache."""
        if not city or self._weather is None:
            return None, False
        try:
            return await self._weather.get_weather_with_status(city)
        except (UpstreamError, ValidationError) as exc:
            logger.warning(f"Continuing without weather for {city}: {exc}")
            return None, False

    async def _name_new_session(self, message: str) -> str:
        fallback = default_session_name()
        if self._session_namer is None:
            return fallback
        try:
            title = await self._session_namer.generate(
                [LLMMessage(role="user", text=SESSION_NAME_PROMPT.format(message=message))],
                temperature=0.3,
                max_output_tokens=30,
            )
        except Exception as exc:
            logger.warning(f"Session naming failed: {exc}")
            return fallback
        lines = title.replace('"', "").replace("'", "").strip().splitlines()
        words = lines[0].split() if lines else []
        return " ".join(words[:6]) or fallback

    # ===========================================
    # Sessions
    # ===========================================

    async def list_sessions(self) -> list[SessionSummary]:
        return await self._repo.list_sessions(limit=SESSION_LIST_LIMIT)

    async def get_messages(self, session_id: str) -> MessagesResponse:
        messages: list[ChatMessage] = await self._repo.list_messages(session_id)
        first = messages[0] if messages else None
        return MessagesResponse(
            messages=messages,
            session_name=first.session_name if first else "New Chat",
            theme=first.theme if first else Theme.TRAVEL,
        )

    async def delete_session(self, session_id: str) -> int:
        deleted = await self._repo.delete_session(session_id)
        logger.info(f"Deleted {deleted} messages of session {session_id}")
        return deleted

    async def rename_session(self, session_id: str, name: Optional[str]) -> str:
        """
        Rename every message of a session.

        Raises:
            ValidationError: The name is empty after trimming
        """
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Name is required")
        await self._repo.rename_session(session_id, cleaned)
        return cleaned
