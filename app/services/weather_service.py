"""
Weather cache gateway.

Serves recent weather for a city while keeping calls to the upstream provider
down: snapshots are cached per lower-cased city name for a fixed TTL, and
concurrent misses for the same city share one upstream request.
"""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from app.core.exceptions import UpstreamError, ValidationError
from app.core.logger import logger
from app.interfaces.weather_provider import IWeatherProvider
from app.models.weather import OpenWeatherResponse, WeatherSnapshot

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

DEFAULT_TTL_SECONDS = 10 * 60


def _round_half_up(value: float) -> int:
    # half up, not round()'s banker's rounding
    return math.floor(value + 0.5)


def wind_speed_kmh(meters_per_second: float) -> int:
    """Convert m/s to km/h, rounded."""
    return _round_half_up(meters_per_second * 3.6)


def wind_direction(degrees: float) -> str:
    """Bucket a bearing into one of 16 compass points (360 wraps to N)."""
    return COMPASS_POINTS[_round_half_up(degrees / 22.5) % 16]


def format_visibility(meters: Optional[float]) -> Optional[str]:
    """'10.0 km' from 1000 m upwards, otherwise '800 meters'."""
    if meters is None:
        return None
    if meters >= 1000:
        return f"{meters / 1000:.1f} km"
    return f"{int(meters)} meters"


def to_snapshot(payload: OpenWeatherResponse) -> WeatherSnapshot:
    """Derive the application-facing snapshot from an upstream payload."""
    return WeatherSnapshot(
        description=payload.weather[0].description,
        temperature=_round_half_up(payload.main.temp),
        feels_like=_round_half_up(payload.main.feels_like),
        humidity=_round_half_up(payload.main.humidity),
        wind_speed=wind_speed_kmh(payload.wind.speed),
        wind_direction=wind_direction(payload.wind.deg),
        pressure=_round_half_up(payload.main.pressure),
        visibility=format_visibility(payload.visibility),
        clouds=_round_half_up(payload.clouds.all) if payload.clouds.all is not None else None,
    )


@dataclass
class WeatherCacheEntry:
    snapshot: WeatherSnapshot
    captured_at: float


class WeatherCache:
    """
    In-process TTL cache keyed by lower-cased city name.

    Expired entries are treated as absent on read and left in place until the
    next successful fetch overwrites them.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, WeatherCacheEntry] = {}

    @staticmethod
    def key(city: str) -> str:
        return city.lower()

    def get(self, city: str) -> Optional[WeatherSnapshot]:
        entry = self._entries.get(self.key(city))
        if entry is None:
            return None
        if self._clock() - entry.captured_at >= self._ttl:
            return None
        return entry.snapshot

    def set(self, city: str, snapshot: WeatherSnapshot) -> None:
        self._entries[self.key(city)] = WeatherCacheEntry(snapshot, self._clock())

    def contains(self, city: str) -> bool:
        return self.get(city) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class WeatherGateway:
    """Cached access to current weather."""

    def __init__(self, provider: IWeatherProvider, cache: WeatherCache):
        self._provider = provider
        self._cache = cache
        self._in_flight: dict[str, asyncio.Future] = {}

    async def get_weather(
        self,
        city: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> WeatherSnapshot:
        """
        Get current weather for a city (cached) or coordinates (uncached).

        Raises:
            ValidationError: Neither a city nor coordinates were supplied
            UpstreamError: The provider failed; nothing is cached
        """
        snapshot, _ = await self.get_weather_with_status(city, lat, lon)
        return snapshot

    async def get_weather_with_status(
        self,
        city: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> tuple[WeatherSnapshot, bool]:
        """
        Same as get_weather, also reporting whether the cache answered.

        Returns (snapshot, cached).
        """
        city = (city or "").strip()
        if not city:
            if lat is None or lon is None:
                raise ValidationError("City or coordinates required")
            payload = await self._provider.fetch_current(lat=lat, lon=lon)
            return to_snapshot(payload), False

        cached = self._cache.get(city)
        if cached is not None:
            logger.debug(f"Using cached weather for {city}")
            return cached, True

        return await self._fetch_shared(city), False

    async def _fetch_shared(self, city: str) -> WeatherSnapshot:
        key = WeatherCache.key(city)
        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug(f"Joining in-flight weather request for {city}")
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            logger.info(f"Fetching new weather data for {city}")
            payload = await self._provider.fetch_current(city=city)
            snapshot = to_snapshot(payload)
            self._cache.set(city, snapshot)
            future.set_result(snapshot)
            return snapshot
        except asyncio.CancelledError:
            # Waiters see an ordinary upstream failure, not our cancellation
            self._fail(future, UpstreamError(f"Weather request for {city} was cancelled"))
            raise
        except Exception as exc:
            self._fail(future, exc)
            raise
        finally:
            del self._in_flight[key]

    @staticmethod
    def _fail(future: asyncio.Future, exc: BaseException) -> None:
        future.set_exception(exc)
        # Mark retrieved so an error nobody else awaited is not reported as lost
        future.exception()
