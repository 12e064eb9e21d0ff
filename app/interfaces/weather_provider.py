"""
Weather provider interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.models.weather import OpenWeatherResponse


class IWeatherProvider(ABC):
    """Abstract interface for current-weather lookups."""

    @abstractmethod
    async def fetch_current(
        self,
        city: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
    ) -> OpenWeatherResponse:
        """
        Fetch current conditions by city name or by coordinates.

        Raises:
            UpstreamError: Non-success response, transport failure or
                unexpected payload
        """
        pass
