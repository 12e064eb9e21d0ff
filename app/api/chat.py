"""
Chat API endpoints.

Main interface for talking to the themed weather assistant.
"""

from fastapi import APIRouter, HTTPException, status

from app.api.deps import ChatServiceDep
from app.core.exceptions import GenerationError, LLMError
from app.core.logger import logger
from app.models.chat import GenerateRequest, GenerateResponse, ThemeInfo, ThemesResponse
from app.models.enums import Theme
from app.services.prompt_builder import THEME_LABELS

router = APIRouter()


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    request: GenerateRequest,
    chat_service: ChatServiceDep,
):
    """
    Send a message to the assistant.

    The reply is grounded in current weather whenever a city can be inferred
    from the message or from the previous turn.
    """
    try:
        return await chat_service.generate_reply(request)
    except GenerationError as e:
        timed_out = isinstance(e.details, dict) and e.details.get("timeout")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT
            if timed_out
            else status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
        )
    except LLMError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"LLM error: {e.message}",
        )
    except Exception as e:
        logger.exception(f"Generate failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate a reply",
        )


@router.get("/themes", response_model=ThemesResponse)
async def list_themes():
    """Available assistant personas."""
    return ThemesResponse(
        themes=[
            ThemeInfo(id=theme, name=THEME_LABELS[theme][0], icon=THEME_LABELS[theme][1])
            for theme in Theme
        ]
    )
