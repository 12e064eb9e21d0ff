"""
Weather Chat - Main Application Entry Point

Themed chat assistant whose advice is grounded in current weather.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting Weather Chat with LLM provider {settings.LLM_PROVIDER}...")
    if not settings.weather_enabled:
        logger.warning("OPENWEATHER_API_KEY is not set; replies will not include weather")

    from app.infrastructure.local.database import dispose_db, init_db

    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Weather Chat...")
    await dispose_db()


def _error_response(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Weather Chat",
        description="Themed assistants with live weather context",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg")
        else:
            message = "Invalid request"
        return _error_response(400, message)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_origin_regex=settings.ALLOWED_ORIGIN_REGEX or None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from app.api import chat, sessions, weather

    app.include_router(chat.router, prefix="/api", tags=["chat"])
    app.include_router(sessions.router, prefix="/api", tags=["sessions"])
    app.include_router(weather.router, prefix="/api", tags=["weather"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
