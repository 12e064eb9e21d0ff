"""
Shared fixtures and fakes.
"""

import asyncio
from typing import Optional, Sequence
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.exceptions import UpstreamError
from app.interfaces.chat_repository import IChatRepository
from app.interfaces.llm_provider import ILLMProvider, LLMMessage
from app.interfaces.weather_provider import IWeatherProvider
from app.models.chat import ChatMessage, ChatMessageCreate, SessionSummary
from app.models.weather import OpenWeatherResponse, WeatherSnapshot
from app.utils.datetime_utils import now_utc


def make_payload(
    description: str = "clear sky",
    temp: float = 22.4,
    feels_like: float = 21.6,
    humidity: float = 55,
    pressure: float = 1013,
    speed: float = 3.0,
    deg: float = 90,
    visibility: Optional[float] = 10000,
    clouds: Optional[float] = 20,
    name: str = "Tokyo",
) -> OpenWeatherResponse:
    return OpenWeatherResponse.model_validate(
        {
            "name": name,
            "weather": [{"description": description}],
            "main": {
                "temp": temp,
                "feels_like": feels_like,
                "humidity": humidity,
                "pressure": pressure,
            },
            "wind": {"speed": speed, "deg": deg},
            "visibility": visibility,
            "clouds": {"all": clouds},
        }
    )


def make_snapshot(**overrides) -> WeatherSnapshot:
    values = dict(
        description="light rain",
        temperature=18,
        feels_like=17,
        humidity=80,
        wind_speed=11,
        wind_direction="E",
        pressure=1008,
        visibility="10.0 km",
        clouds=90,
    )
    values.update(overrides)
    return WeatherSnapshot(**values)


class FakeWeatherProvider(IWeatherProvider):
    """Returns canned payloads and counts upstream calls."""

    def __init__(self, payload: Optional[OpenWeatherResponse] = None, error: Exception | None = None):
        self.payload = payload or make_payload()
        self.error = error
        self.calls: list[dict] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch_current(self, city=None, lat=None, lon=None) -> OpenWeatherResponse:
        self.calls.append({"city": city, "lat": lat, "lon": lon})
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


class ScriptedLLMProvider(ILLMProvider):
    """Replays a script of replies or exceptions, one per call."""

    def __init__(self, *script):
        self.script = list(script) or ["Sounds like a great day out."]
        self.calls: list[Sequence[LLMMessage]] = []

    async def generate(self, contents, temperature=0.7, max_output_tokens=1024) -> str:
        self.calls.append(list(contents))
        step = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(step, Exception):
            raise step
        return step

    def get_model_name(self) -> str:
        return "scripted"


class InMemoryChatRepository(IChatRepository):
    """Dict-backed chat repository for API tests."""

    def __init__(self):
        self.messages: list[ChatMessage] = []

    async def add_message(self, message: ChatMessageCreate) -> ChatMessage:
        created = ChatMessage(
            id=str(uuid4()),
            created_at=message.created_at or now_utc(),
            **message.model_dump(exclude={"created_at"}),
        )
        self.messages.append(created)
        return created

    async def list_messages(self, session_id: str, limit: Optional[int] = None) -> list[ChatMessage]:
        rows = sorted(
            (m for m in self.messages if m.session_id == session_id),
            key=lambda m: m.created_at,
        )
        return rows[-limit:] if limit else rows

    async def list_sessions(self, limit: int = 50) -> list[SessionSummary]:
        grouped: dict[str, list[ChatMessage]] = {}
        for message in sorted(self.messages, key=lambda m: m.created_at):
            grouped.setdefault(message.session_id, []).append(message)
        summaries = [
            SessionSummary(
                session_id=session_id,
                session_name=rows[0].session_name,
                last_message_at=rows[-1].created_at,
                message_count=len(rows),
                theme=rows[0].theme,
            )
            for session_id, rows in grouped.items()
        ]
        summaries.sort(key=lambda s: s.last_message_at, reverse=True)
        return summaries[:limit]

    async def delete_session(self, session_id: str) -> int:
        before = len(self.messages)
        self.messages = [m for m in self.messages if m.session_id != session_id]
        return before - len(self.messages)

    async def rename_session(self, session_id: str, name: str) -> int:
        count = 0
        for index, message in enumerate(self.messages):
            if message.session_id == session_id:
                self.messages[index] = message.model_copy(update={"session_name": name})
                count += 1
        return count


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def session_factory():
    """In-memory SQLite session factory with the schema created."""
    from app.infrastructure.local.database import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def weather_provider() -> FakeWeatherProvider:
    return FakeWeatherProvider()


@pytest.fixture
def upstream_down() -> FakeWeatherProvider:
    return FakeWeatherProvider(error=UpstreamError("Weather API error (500)", status_code=500))
