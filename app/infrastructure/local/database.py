"""
Database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
"""

from functools import lru_cache
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, Index, String, Text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.core.config import get_settings
from app.utils.datetime_utils import now_utc, to_naive_utc


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def _naive_now():
    return to_naive_utc(now_utc())


# ===========================================
# ORM Models
# ===========================================


class ChatMessageORM(Base):
    """Chat message ORM model."""

    __tablename__ = "chat_messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    session_id = Column(String(100), nullable=False, index=True)
    session_name = Column(String(200), nullable=False, default="New Chat")
    role = Column(String(10), nullable=False)
    text = Column(Text, nullable=False)
    lang = Column(String(20), nullable=False, default="en-US")
    theme = Column(String(20), nullable=False, default="travel")
    city = Column(String(100), nullable=True)
    weather = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_naive_now, index=True)

    __table_args__ = (Index("ix_chat_messages_session_created", "session_id", "created_at"),)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Initialize database tables."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db():
    """Close pooled connections."""
    await get_engine().dispose()
