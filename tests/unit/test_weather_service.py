"""
Unit tests for the weather cache gateway.
"""

import asyncio

import pytest

from app.core.exceptions import UpstreamError, ValidationError
from app.services.weather_service import (
    WeatherCache,
    WeatherGateway,
    format_visibility,
    to_snapshot,
    wind_direction,
    wind_speed_kmh,
)
from tests.conftest import FakeWeatherProvider, make_payload, make_snapshot


@pytest.mark.parametrize(
    ("degrees", "expected"),
    [
        (0, "N"),
        (11.24, "N"),
        (11.25, "NNE"),
        (90, "E"),
        (180, "S"),
        (270, "W"),
        (348.75, "N"),
        (360, "N"),
    ],
)
def test_wind_direction(degrees, expected):
    assert wind_direction(degrees) == expected


def test_wind_speed_converts_to_kmh():
    assert wind_speed_kmh(10) == 36
    assert wind_speed_kmh(0) == 0
    assert wind_speed_kmh(3.0) == 11


def test_format_visibility():
    assert format_visibility(10000) == "10.0 km"
    assert format_visibility(1000) == "1.0 km"
    assert format_visibility(800) == "800 meters"
    assert format_visibility(None) is None


def test_to_snapshot_rounds_half_up():
    snapshot = to_snapshot(make_payload(temp=2.5, feels_like=-0.4, deg=180, visibility=None, clouds=None))

    assert snapshot.temperature == 3
    assert snapshot.feels_like == 0
    assert snapshot.wind_direction == "S"
    assert snapshot.visibility is None
    assert snapshot.clouds is None


def test_to_snapshot_serialises_camel_case():
    data = to_snapshot(make_payload()).model_dump(by_alias=True)

    assert data["feelsLike"] == 22
    assert data["windSpeed"] == 11
    assert data["windDirection"] == "E"
    assert data["visibility"] == "10.0 km"


def test_cache_expires_at_ttl(fake_clock):
    cache = WeatherCache(ttl_seconds=600, clock=fake_clock)
    cache.set("Tokyo", make_snapshot())

    fake_clock.advance(599.9)
    assert cache.contains("tokyo")

    fake_clock.advance(0.1)
    assert cache.get("Tokyo") is None
    # Expired entries stay until overwritten
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


def test_cache_keys_keep_spaces(fake_clock):
    cache = WeatherCache(clock=fake_clock)
    cache.set("New York", make_snapshot(description="haze"))

    assert cache.get("new york").description == "haze"
    assert cache.get("NEW YORK").description == "haze"
    assert cache.get("NewYork") is None
    assert WeatherCache.key("New York") != WeatherCache.key("NewYork")


@pytest.mark.asyncio
async def test_cache_hit_skips_upstream(fake_clock, weather_provider):
    gateway = WeatherGateway(weather_provider, WeatherCache(clock=fake_clock))

    first, first_cached = await gateway.get_weather_with_status("Tokyo")
    second, second_cached = await gateway.get_weather_with_status("TOKYO")

    assert first == second
    assert (first_cached, second_cached) == (False, True)
    assert len(weather_provider.calls) == 1


@pytest.mark.asyncio
async def test_expired_entry_is_fetched_again(fake_clock, weather_provider):
    gateway = WeatherGateway(weather_provider, WeatherCache(ttl_seconds=600, clock=fake_clock))

    await gateway.get_weather("Paris")
    fake_clock.advance(600)
    await gateway.get_weather("Paris")

    assert len(weather_provider.calls) == 2


@pytest.mark.asyncio
async def test_preseeded_cache_is_served(fake_clock, weather_provider):
    cache = WeatherCache(clock=fake_clock)
    cache.set("London", make_snapshot(description="fog"))
    gateway = WeatherGateway(weather_provider, cache)

    snapshot = await gateway.get_weather("London")

    assert snapshot.description == "fog"
    assert weather_provider.calls == []


@pytest.mark.asyncio
async def test_upstream_failure_is_not_cached(fake_clock, upstream_down):
    cache = WeatherCache(clock=fake_clock)
    gateway = WeatherGateway(upstream_down, cache)

    with pytest.raises(UpstreamError):
        await gateway.get_weather("Atlantis")

    assert len(cache) == 0
    assert not gateway._in_flight


@pytest.mark.asyncio
async def test_missing_city_and_coordinates(weather_provider):
    gateway = WeatherGateway(weather_provider, WeatherCache())

    with pytest.raises(ValidationError):
        await gateway.get_weather("   ")
    with pytest.raises(ValidationError):
        await gateway.get_weather(lat=35.6)

    assert weather_provider.calls == []


@pytest.mark.asyncio
async def test_coordinate_lookups_are_not_cached(weather_provider):
    cache = WeatherCache()
    gateway = WeatherGateway(weather_provider, cache)

    _, cached = await gateway.get_weather_with_status(lat=35.68, lon=139.69)
    await gateway.get_weather(lat=35.68, lon=139.69)

    assert cached is False
    assert len(weather_provider.calls) == 2
    assert weather_provider.calls[0] == {"city": None, "lat": 35.68, "lon": 139.69}
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_request(weather_provider):
    weather_provider.gate = asyncio.Event()
    gateway = WeatherGateway(weather_provider, WeatherCache())

    tasks = [asyncio.create_task(gateway.get_weather(city)) for city in ("Osaka", "osaka", "OSAKA")]
    await asyncio.sleep(0)
    weather_provider.gate.set()
    results = await asyncio.gather(*tasks)

    assert len(weather_provider.calls) == 1
    assert results[0] == results[1] == results[2]


@pytest.mark.asyncio
async def test_concurrent_misses_share_the_error(upstream_down):
    upstream_down.gate = asyncio.Event()
    cache = WeatherCache()
    gateway = WeatherGateway(upstream_down, cache)

    tasks = [asyncio.create_task(gateway.get_weather("Nowhere")) for _ in range(3)]
    await asyncio.sleep(0)
    upstream_down.gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert len(upstream_down.calls) == 1
    assert all(isinstance(result, UpstreamError) for result in results)
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_next_request_after_failure_goes_upstream(fake_clock):
    provider = FakeWeatherProvider(error=UpstreamError("boom", status_code=502))
    gateway = WeatherGateway(provider, WeatherCache(clock=fake_clock))

    with pytest.raises(UpstreamError):
        await gateway.get_weather("Rome")
    provider.error = None
    snapshot = await gateway.get_weather("Rome")

    assert snapshot.temperature == 22
    assert len(provider.calls) == 2


@pytest.mark.asyncio
async def test_cancelled_fetch_fails_waiters_with_upstream_error(weather_provider):
    weather_provider.gate = asyncio.Event()
    cache = WeatherCache()
    gateway = WeatherGateway(weather_provider, cache)

    leader = asyncio.create_task(gateway.get_weather("Paris"))
    await asyncio.sleep(0)
    follower = asyncio.create_task(gateway.get_weather("paris"))
    await asyncio.sleep(0)
    leader.cancel()
    results = await asyncio.gather(leader, follower, return_exceptions=True)

    assert isinstance(results[0], asyncio.CancelledError)
    assert isinstance(results[1], UpstreamError)
    assert len(weather_provider.calls) == 1
    assert len(cache) == 0
    assert not gateway._in_flight


@pytest.mark.asyncio
async def test_timed_out_fetch_does_not_cancel_waiters(weather_provider):
    weather_provider.gate = asyncio.Event()
    gateway = WeatherGateway(weather_provider, WeatherCache())

    leader = asyncio.create_task(asyncio.wait_for(gateway.get_weather("Lima"), timeout=0.05))
    await asyncio.sleep(0.01)
    follower = asyncio.create_task(gateway.get_weather("Lima"))
    results = await asyncio.gather(leader, follower, return_exceptions=True)

    assert isinstance(results[0], asyncio.TimeoutError)
    assert isinstance(results[1], UpstreamError)

    # The next lookup starts a fresh fetch
    weather_provider.gate.set()
    snapshot = await gateway.get_weather("Lima")
    assert snapshot.temperature == 22
    assert len(weather_provider.calls) == 2
