"""
Session API endpoints.

History, listing, deletion and renaming of chat sessions.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status

from app.api.deps import SessionServiceDep
from app.core.exceptions import ValidationError
from app.core.logger import logger
from app.models.chat import (
    DeleteSessionResponse,
    MessagesResponse,
    RenameSessionRequest,
    RenameSessionResponse,
    SessionsResponse,
)

router = APIRouter()

SessionId = Annotated[str, Path(min_length=1, max_length=100)]


@router.get("/messages/{session_id}", response_model=MessagesResponse)
async def get_messages(
    service: SessionServiceDep,
    session_id: SessionId,
):
    """Get all messages of a session, oldest first."""
    try:
        return await service.get_messages(session_id)
    except Exception as e:
        logger.exception(f"Failed to load messages for {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load messages",
        )


@router.get("/sessions", response_model=SessionsResponse)
async def list_sessions(service: SessionServiceDep):
    """List sessions, most recently active first."""
    try:
        sessions = await service.list_sessions()
    except Exception as e:
        logger.exception(f"Failed to list sessions: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list sessions",
        )
    return SessionsResponse(sessions=sessions)


@router.delete("/sessions/{session_id}", response_model=DeleteSessionResponse)
async def delete_session(
    service: SessionServiceDep,
    session_id: SessionId,
):
    """Delete a session and all its messages."""
    try:
        deleted = await service.delete_session(session_id)
    except Exception as e:
        logger.exception(f"Failed to delete session {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete session",
        )
    return DeleteSessionResponse(deleted=deleted)


@router.put("/sessions/{session_id}/rename", response_model=RenameSessionResponse)
async def rename_session(
    request: RenameSessionRequest,
    service: SessionServiceDep,
    session_id: SessionId,
):
    """Rename a session."""
    try:
        name = await service.rename_session(session_id, request.name)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        )
    except Exception as e:
        logger.exception(f"Failed to rename session {session_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to rename session",
        )
    return RenameSessionResponse(session_name=name)
