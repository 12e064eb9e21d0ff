"""
Prompt assembly for themed, weather-aware replies.
"""

from __future__ import annotations

from typing import Optional, Sequence

from app.interfaces.llm_provider import LLMMessage
from app.models.chat import ChatMessage
from app.models.enums import MessageRole, Theme
from app.models.weather import WeatherSnapshot

THEME_PROMPTS: dict[Theme, str] = {
    Theme.TRAVEL: (
        "You are a professional travel advisor who provides personalized travel "
        "recommendations based on weather conditions. Focus on destinations, activities, "
        "packing tips, and best times to visit."
    ),
    Theme.FASHION: (
        "You are a fashion consultant who suggests weather-appropriate outfits. Consider "
        "temperature, humidity, and weather conditions to recommend comfortable and "
        "stylish clothing options."
    ),
    Theme.SPORTS: (
        "You are a sports and fitness coach who recommends outdoor activities based on "
        "weather. Focus on safety, optimal conditions, and alternative indoor options "
        "when needed."
    ),
    Theme.AGRICULTURE: (
        "You are an agricultural expert providing farming and gardening advice based on "
        "weather patterns. Consider planting schedules, crop care, and weather-related risks."
    ),
    Theme.EVENTS: (
        "You are an event planner specializing in weather-conscious planning. Provide "
        "contingency plans, timing recommendations, and weather-appropriate suggestions."
    ),
    Theme.HEALTH: (
        "You are a health and wellness advisor who provides weather-based health tips. "
        "Consider air quality, UV exposure, temperature extremes, and their health impacts."
    ),
}

# id -> (display name, icon) for the theme picker
THEME_LABELS: dict[Theme, tuple[str, str]] = {
    Theme.TRAVEL: ("Travel Assistant", "✈️"),
    Theme.FASHION: ("Fashion Advisor", "👔"),
    Theme.SPORTS: ("Sports Coach", "🏃"),
    Theme.AGRICULTURE: ("Agriculture Expert", "🌾"),
    Theme.EVENTS: ("Event Planner", "🎉"),
    Theme.HEALTH: ("Health Advisor", "💊"),
}

LANGUAGE_INSTRUCTIONS: dict[str, str] = {
    "ja": "Please respond in Japanese (日本語で返信してください).",
    "es": "Please respond in Spanish.",
    "fr": "Please respond in French.",
    "de": "Please respond in German.",
    "it": "Please respond in Italian.",
    "pt": "Please respond in Portuguese.",
    "zh": "Please respond in Chinese.",
    "ko": "Please respond in Korean.",
    "hi": "Please respond in Hindi.",
}

DEFAULT_HISTORY_LIMIT = 5


def persona_prompt(theme: Theme | str | None) -> str:
    return THEME_PROMPTS[theme if isinstance(theme, Theme) else Theme.parse(theme)]


def weather_block(city: str, weather: WeatherSnapshot) -> str:
    """Format every known weather field for the system prompt."""
    lines = [
        f"Current weather in {city}:",
        f"- Conditions: {weather.description[:1].upper()}{weather.description[1:]}",
        f"- Temperature: {weather.temperature}°C (feels like {weather.feels_like}°C)",
        f"- Humidity: {weather.humidity}%",
        f"- Wind: {weather.wind_speed} km/h ({weather.wind_direction})",
        f"- Pressure: {weather.pressure} hPa",
    ]
    if weather.visibility:
        lines.append(f"- Visibility: {weather.visibility}")
    if weather.clouds is not None:
        lines.append(f"- Cloud cover: {weather.clouds}%")
    lines.append(
        f"Use this current weather information for {city} in your advice and refer to "
        "the actual conditions."
    )
    return "\n".join(lines)


def language_instruction(lang: Optional[str]) -> Optional[str]:
    """Instruction for the primary subtag of `lang`, or None when unsupported."""
    primary = (lang or "").replace("_", "-").split("-")[0].lower()
    return LANGUAGE_INSTRUCTIONS.get(primary)


def build_system_prompt(
    theme: Theme | str | None,
    lang: Optional[str],
    weather: Optional[WeatherSnapshot] = None,
    city: Optional[str] = None,
) -> str:
    sections = [persona_prompt(theme)]
    # Partial weather context is never sent
    if weather is not None and city:
        sections.append(weather_block(city, weather))
    instruction = language_instruction(lang)
    if instruction:
        sections.append(instruction)
    return "\n\n".join(sections)


def build_contents(
    message: str,
    system_prompt: str,
    history: Sequence[ChatMessage] = (),
    history_limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[LLMMessage]:
    """
    Conversation sent to the model.

    The last `history_limit` stored messages (oldest first), then the system
    prompt and the current message as two trailing user turns.
    """
    recent = list(history)[-history_limit:] if history_limit > 0 else []
    contents = [
        LLMMessage(role="user" if item.role == MessageRole.USER else "model", text=item.text)
        for item in recent
    ]
    contents.append(LLMMessage(role="user", text=system_prompt))
    contents.append(LLMMessage(role="user", text=message))
    return contents
