"""
Chat model definitions.

Stored chat messages, session summaries and the request/response bodies of the
chat endpoints. Field names are camelCase on the wire.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.enums import MessageRole, Theme
from app.models.weather import WeatherSnapshot


class CamelModel(BaseModel):
    """Base model serialised with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _lenient_theme(value):
    if isinstance(value, Theme):
        return value
    return Theme.parse(value)


# ===========================================
# Stored messages
# ===========================================


class ChatMessageBase(CamelModel):
    """Base chat message fields."""

    session_id: str = Field(..., max_length=100, description="Chat session ID")
    session_name: str = Field("New Chat", max_length=200, description="Session label")
    role: MessageRole = Field(..., description="Message author")
    text: str = Field(..., description="Message body")
    lang: str = Field("en-US", max_length=20, description="Locale tag")
    theme: Theme = Field(Theme.TRAVEL, description="Assistant persona")
    city: Optional[str] = Field(None, max_length=100, description="City tied to this turn")
    weather: Optional[WeatherSnapshot] = Field(
        None, description="Weather resolved for this turn (user messages only)"
    )


class ChatMessageCreate(ChatMessageBase):
    """Schema for creating a chat message."""

    created_at: Optional[datetime] = Field(None, description="Defaults to now")


class ChatMessage(ChatMessageBase):
    """Chat message model."""

    id: str
    created_at: datetime


class SessionSummary(CamelModel):
    """One row of the session list."""

    session_id: str
    session_name: str
    last_message_at: datetime
    message_count: int
    theme: Theme


# ===========================================
# Endpoint bodies
# ===========================================


class GenerateRequest(CamelModel):
    """Request model for the generate endpoint."""

    message: str = Field(..., min_length=1, max_length=4000, description="User message")
    lang: str = Field("en-US", max_length=20, description="Locale tag, e.g. en-US")
    city: Optional[str] = Field(None, max_length=100, description="City from the previous turn")
    session_id: Optional[str] = Field(None, max_length=100)
    session_name: Optional[str] = Field(None, max_length=200)
    theme: Theme = Field(Theme.TRAVEL)

    @field_validator("theme", mode="before")
    @classmethod
    def _parse_theme(cls, value):
        return _lenient_theme(value)

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class GenerateResponse(CamelModel):
    """Response model for the generate endpoint."""

    ok: bool = True
    output: str
    city: Optional[str] = None
    weather: Optional[WeatherSnapshot] = None
    session_id: str
    session_name: str
    theme: Theme
    fallback: bool = Field(False, description="True when the reply was synthesised locally")


class MessagesResponse(CamelModel):
    ok: bool = True
    messages: list[ChatMessage]
    session_name: str
    theme: Theme


class SessionsResponse(CamelModel):
    ok: bool = True
    sessions: list[SessionSummary]


class DeleteSessionResponse(CamelModel):
    ok: bool = True
    deleted: int


class RenameSessionRequest(CamelModel):
    name: str = Field(..., max_length=200)


class RenameSessionResponse(CamelModel):
    ok: bool = True
    session_name: str


class ThemeInfo(CamelModel):
    id: Theme
    name: str
    icon: str


class ThemesResponse(CamelModel):
    ok: bool = True
    themes: list[ThemeInfo]
