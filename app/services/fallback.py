"""
Deterministic replies used when the text generation service stays overloaded.
"""

from __future__ import annotations

from typing import Optional

from app.models.weather import WeatherSnapshot

GENERIC_APOLOGY = (
    "I'm sorry, the AI service is busy right now and I couldn't put together a full "
    "answer. Please try again in a moment."
)

WET_CONDITIONS = ("rain", "drizzle", "thunderstorm", "shower", "snow", "sleet")


def clothing_advice(temperature: int) -> str:
    if temperature >= 30:
        return "It's hot, so wear light, breathable clothing and stay hydrated."
    if temperature >= 20:
        return "It's warm and pleasant, so light clothing should be comfortable."
    if temperature >= 10:
        return "It's cool, so bring a light jacket or a sweater."
    if temperature >= 0:
        return "It's cold, so a warm coat is a good idea."
    return "It's freezing, so dress in heavy winter layers, gloves and a hat."


def weather_summary(city: str, weather: WeatherSnapshot) -> str:
    """Short rule-based summary: conditions, clothing advice, umbrella reminder."""
    parts = [
        "The AI service is busy right now, so here is a quick summary instead.",
        (
            f"Current weather in {city}: {weather.description}, {weather.temperature}°C "
            f"(feels like {weather.feels_like}°C), humidity {weather.humidity}%, "
            f"wind {weather.wind_speed} km/h."
        ),
        clothing_advice(weather.temperature),
    ]
    description = weather.description.lower()
    if any(condition in description for condition in WET_CONDITIONS):
        parts.append("Don't forget an umbrella!")
    return " ".join(parts)


def fallback_reply(weather: Optional[WeatherSnapshot], city: Optional[str]) -> str:
    if weather is not None and city:
        return weather_summary(city, weather)
    return GENERIC_APOLOGY
