"""
Weather models.

OpenWeather* models describe the upstream payload and are validated as soon as
the response arrives. WeatherSnapshot is what the rest of the application sees.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OpenWeatherCondition(BaseModel):
    """One entry of the upstream `weather` array."""

    description: str


class OpenWeatherMain(BaseModel):
    """Upstream `main` block (metric units)."""

    temp: float
    feels_like: float
    humidity: float
    pressure: float


class OpenWeatherWind(BaseModel):
    """Upstream `wind` block; speed is in meters/second."""

    speed: float = 0.0
    deg: float = 0.0


class OpenWeatherClouds(BaseModel):
    all: Optional[float] = None


class OpenWeatherResponse(BaseModel):
    """Current weather payload from /data/2.5/weather."""

    name: Optional[str] = None
    weather: list[OpenWeatherCondition] = Field(..., min_length=1)
    main: OpenWeatherMain
    wind: OpenWeatherWind = Field(default_factory=OpenWeatherWind)
    visibility: Optional[float] = None
    clouds: OpenWeatherClouds = Field(default_factory=OpenWeatherClouds)


class WeatherSnapshot(BaseModel):
    """Weather conditions for a city, with derived display fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    description: str = Field(..., description="Condition text, e.g. 'light rain'")
    temperature: int = Field(..., description="Temperature in °C")
    feels_like: int = Field(..., description="Apparent temperature in °C")
    humidity: int = Field(..., description="Relative humidity in %")
    wind_speed: int = Field(..., description="Wind speed in km/h")
    wind_direction: str = Field(..., description="16-point compass direction")
    pressure: int = Field(..., description="Pressure in hPa")
    visibility: Optional[str] = Field(None, description="'10.0 km' or '800 meters'")
    clouds: Optional[int] = Field(None, description="Cloud cover in %")


class WeatherLookupResponse(BaseModel):
    """Response body of the weather diagnostic endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = True
    city: Optional[str] = None
    weather: WeatherSnapshot
    cached: bool = False


class HealthResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = True
    status: str = "healthy"
    timestamp: datetime
    cache_size: int = 0
