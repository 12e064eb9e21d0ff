"""
OpenWeatherMap provider.

Fetches current conditions from /data/2.5/weather in metric units.
"""

from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.config import get_settings
from app.core.exceptions import UpstreamError, ValidationError
from app.core.logger import logger
from app.interfaces.weather_provider import IWeatherProvider
from app.models.weather import OpenWeatherResponse


class OpenWeatherProvider(IWeatherProvider):
    """Current weather over HTTP with httpx."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._api_key = api_key or settings.OPENWEATHER_API_KEY
        self._base_url = (base_url or settings.OPENWEATHER_BASE_URL).rstrip("/")
        self._timeout = timeout or settings.WEATHER_TIMEOUT_SECONDS
        self._transport = transport

        if not self._api_key:
            raise ValueError("OPENWEATHER_API_KEY is required for the weather provider")

    def _build_params(
        self,
        city: Optional[str],
        lat: Optional[float],
        lon: Optional[float],
    ) -> dict[str, str]:
        params = {"appid": self._api_key, "units": "metric"}
        if lat is not None and lon is not None:
            params["lat"] = str(lat)
            params["lon"] = str(lon)
        elif city and city.strip():
            params["q"] = city.strip()
        else:
            raise ValidationError("City or coordinates required")
        return params

    async def fetch_current(
        self,
        city: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> OpenWeatherResponse:
        params = self._build_params(city, lat, lon)
        target = params.get("q") or f"{lat},{lon}"

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(f"{self._base_url}/weather", params=params)
        except httpx.HTTPError as exc:
            logger.warning(f"Weather request for {target} failed: {exc}")
            raise UpstreamError(f"Weather API unreachable: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            logger.warning(
                f"Weather API returned {response.status_code} for {target}: {response.text[:200]}"
            )
            raise UpstreamError(
                f"Weather API error ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            return OpenWeatherResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise UpstreamError("Weather API returned an unexpected payload", details=str(exc)) from exc
