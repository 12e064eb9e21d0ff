"""
Weather API endpoints.

Diagnostics for the weather gateway and the service health probe.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from app.api.deps import WeatherCacheDep, WeatherGatewayDep
from app.core.exceptions import UpstreamError, ValidationError
from app.core.logger import logger
from app.models.weather import HealthResponse, WeatherLookupResponse
from app.utils.datetime_utils import now_utc

router = APIRouter()


@router.get("/test-weather", response_model=WeatherLookupResponse)
async def test_weather(
    gateway: WeatherGatewayDep,
    city: Optional[str] = Query(None, max_length=100),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
):
    """Look up current weather by city (cached) or by coordinates."""
    if gateway is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Weather API key is not configured",
        )

    try:
        weather, cached = await gateway.get_weather_with_status(city=city, lat=lat, lon=lon)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except UpstreamError as e:
        logger.warning(f"Weather lookup failed: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Weather service error: {e.message}",
        )

    return WeatherLookupResponse(
        city=(city or "").strip() or None,
        weather=weather,
        cached=cached,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(cache: WeatherCacheDep):
    """Health check endpoint."""
    return HealthResponse(timestamp=now_utc(), cache_size=len(cache))
