"""
Chat repository interface.

Defines the contract for chat message persistence. Sessions are not stored on
their own: a session is the set of messages sharing a session ID.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from app.models.chat import ChatMessage, ChatMessageCreate, SessionSummary


class IChatRepository(ABC):
    """Abstract interface for chat message persistence."""

    @abstractmethod
    async def add_message(self, message: ChatMessageCreate) -> ChatMessage:
        """
        Store a single message.

        Args:
            message: Message to store; created_at defaults to now

        Returns:
            The stored ChatMessage
        """
        pass

    @abstractmethod
    async def list_messages(
        self,
        session_id: str,
        limit: Optional[int] = None,
    ) -> list[ChatMessage]:
        """
        List messages for a session, oldest first.

        Args:
            session_id: Session ID
            limit: When set, only the most recent `limit` messages are returned
                (still oldest first)

        Returns:
            List of chat messages
        """
        pass

    @abstractmethod
    async def list_sessions(self, limit: int = 50) -> list[SessionSummary]:
        """
        Summarise sessions, most recently active first.

        Args:
            limit: Max sessions

        Returns:
            List of session summaries
        """
        pass

    @abstractmethod
    async def delete_session(self, session_id: str) -> int:
        """
        Delete every message of a session.

        Returns:
            Number of deleted messages
        """
        pass

    @abstractmethod
    async def rename_session(self, session_id: str, name: str) -> int:
        """
        Set session_name on every message of a session.

        Returns:
            Number of messages matched
        """
        pass
