"""
SQLAlchemy implementation of the chat repository.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, func, select, update

from app.infrastructure.local.database import ChatMessageORM, get_session_factory
from app.interfaces.chat_repository import IChatRepository
from app.models.chat import ChatMessage, ChatMessageCreate, SessionSummary
from app.models.enums import MessageRole, Theme
from app.models.weather import WeatherSnapshot
from app.utils.datetime_utils import ensure_utc, now_utc, to_naive_utc


class SqlChatRepository(IChatRepository):
    """Chat repository backed by a single chat_messages table."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ChatMessageORM) -> ChatMessage:
        """Convert message ORM object to Pydantic model."""
        return ChatMessage(
            id=orm.id,
            session_id=orm.session_id,
            session_name=orm.session_name,
            role=MessageRole(orm.role),
            text=orm.text,
            lang=orm.lang,
            theme=Theme.parse(orm.theme),
            city=orm.city,
            weather=WeatherSnapshot.model_validate(orm.weather) if orm.weather else None,
            created_at=ensure_utc(orm.created_at),
        )

    async def add_message(self, message: ChatMessageCreate) -> ChatMessage:
        """Store a single message."""
        async with self._session_factory() as session:
            orm = ChatMessageORM(
                session_id=message.session_id,
                session_name=message.session_name,
                role=message.role.value,
                text=message.text,
                lang=message.lang,
                theme=message.theme.value,
                city=message.city,
                weather=message.weather.model_dump() if message.weather else None,
                created_at=to_naive_utc(message.created_at or now_utc()),
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def list_messages(
        self,
        session_id: str,
        limit: Optional[int] = None,
    ) -> list[ChatMessage]:
        """List messages for a session, oldest first."""
        async with self._session_factory() as session:
            if limit is None:
                query = (
                    select(ChatMessageORM)
                    .where(ChatMessageORM.session_id == session_id)
                    .order_by(ChatMessageORM.created_at.asc())
                )
                result = await session.execute(query)
                return [self._orm_to_model(orm) for orm in result.scalars().all()]

            query = (
                select(ChatMessageORM)
                .where(ChatMessageORM.session_id == session_id)
                .order_by(ChatMessageORM.created_at.desc())
                .limit(limit)
            )
            result = await session.execute(query)
            newest_first = [self._orm_to_model(orm) for orm in result.scalars().all()]
            return list(reversed(newest_first))

    async def list_sessions(self, limit: int = 50) -> list[SessionSummary]:
        """Summarise sessions, most recently active first."""
        last_message_at = func.max(ChatMessageORM.created_at)
        async with self._session_factory() as session:
            stats_query = (
                select(
                    ChatMessageORM.session_id,
                    last_message_at.label("last_message_at"),
                    func.count(ChatMessageORM.id).label("message_count"),
                )
                .group_by(ChatMessageORM.session_id)
                .order_by(last_message_at.desc())
                .limit(limit)
            )
            stats = (await session.execute(stats_query)).all()
            if not stats:
                return []

            # Name and theme come from the first message of each session
            labels_query = (
                select(
                    ChatMessageORM.session_id,
                    ChatMessageORM.session_name,
                    ChatMessageORM.theme,
                )
                .where(ChatMessageORM.session_id.in_([row.session_id for row in stats]))
                .order_by(ChatMessageORM.created_at.asc())
            )
            labels: dict[str, tuple[str, str]] = {}
            for row in (await session.execute(labels_query)).all():
                labels.setdefault(row.session_id, (row.session_name, row.theme))

        summaries = []
        for row in stats:
            name, theme = labels.get(row.session_id, ("New Chat", Theme.TRAVEL.value))
            summaries.append(
                SessionSummary(
                    session_id=row.session_id,
                    session_name=name,
                    last_message_at=ensure_utc(row.last_message_at),
                    message_count=row.message_count,
                    theme=Theme.parse(theme),
                )
            )
        return summaries

    async def delete_session(self, session_id: str) -> int:
        """Delete every message of a session."""
        async with self._session_factory() as session:
            result = await session.execute(
                delete(ChatMessageORM).where(ChatMessageORM.session_id == session_id)
            )
            await session.commit()
            return result.rowcount or 0

    async def rename_session(self, session_id: str, name: str) -> int:
        """Set session_name on every message of a session."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(ChatMessageORM)
                .where(ChatMessageORM.session_id == session_id)
                .values(session_name=name)
            )
            await session.commit()
            return result.rowcount or 0
