"""
Unit tests for the SQL chat repository.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.infrastructure.local.chat_repository import SqlChatRepository
from app.models.chat import ChatMessageCreate
from app.models.enums import MessageRole, Theme
from tests.conftest import make_snapshot

T0 = datetime(2025, 6, 10, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def chat_repo(session_factory):
    return SqlChatRepository(session_factory)


def _message(session_id: str, index: int, **overrides) -> ChatMessageCreate:
    values = dict(
        session_id=session_id,
        session_name=f"Session {session_id}",
        role=MessageRole.USER if index % 2 == 0 else MessageRole.AI,
        text=f"message {index}",
        created_at=T0 + timedelta(minutes=index),
    )
    values.update(overrides)
    return ChatMessageCreate(**values)


@pytest.mark.asyncio
async def test_add_message_round_trips_weather(chat_repo):
    weather = make_snapshot()

    stored = await chat_repo.add_message(
        _message("s1", 0, city="Tokyo", weather=weather, theme=Theme.SPORTS, lang="ja-JP")
    )

    assert stored.id
    assert stored.weather == weather
    assert stored.theme == Theme.SPORTS
    assert stored.created_at == T0
    assert stored.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_list_messages_ascending_and_limited(chat_repo):
    for index in (3, 0, 2, 1, 4):
        await chat_repo.add_message(_message("s1", index))
    await chat_repo.add_message(_message("other", 9))

    everything = await chat_repo.list_messages("s1")
    recent = await chat_repo.list_messages("s1", limit=2)

    assert [m.text for m in everything] == [f"message {i}" for i in range(5)]
    assert [m.text for m in recent] == ["message 3", "message 4"]
    assert await chat_repo.list_messages("missing") == []


@pytest.mark.asyncio
async def test_list_sessions_newest_first(chat_repo):
    await chat_repo.add_message(_message("old", 0, theme=Theme.HEALTH))
    await chat_repo.add_message(_message("old", 1))
    await chat_repo.add_message(_message("new", 5, theme=Theme.EVENTS))

    sessions = await chat_repo.list_sessions()

    assert [s.session_id for s in sessions] == ["new", "old"]
    old = sessions[1]
    assert old.message_count == 2
    assert old.theme == Theme.HEALTH
    assert old.session_name == "Session old"
    assert old.last_message_at == T0 + timedelta(minutes=1)


@pytest.mark.asyncio
async def test_list_sessions_respects_limit(chat_repo):
    for index in range(4):
        await chat_repo.add_message(_message(f"s{index}", index))

    sessions = await chat_repo.list_sessions(limit=2)

    assert [s.session_id for s in sessions] == ["s3", "s2"]


@pytest.mark.asyncio
async def test_rename_and_delete_session(chat_repo):
    await chat_repo.add_message(_message("s1", 0))
    await chat_repo.add_message(_message("s1", 1))
    await chat_repo.add_message(_message("s2", 2))

    renamed = await chat_repo.rename_session("s1", "Kyoto trip")
    messages = await chat_repo.list_messages("s1")
    deleted = await chat_repo.delete_session("s1")

    assert renamed == 2
    assert {m.session_name for m in messages} == {"Kyoto trip"}
    assert deleted == 2
    assert await chat_repo.list_messages("s1") == []
    assert len(await chat_repo.list_messages("s2")) == 1
    assert await chat_repo.delete_session("s1") == 0
