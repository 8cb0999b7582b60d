"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- Exception handlers for API errors and completion engine errors
- API v1 router mounting
- Health check endpoint
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from profile_engine.api.v1.router import router as v1_router
from profile_engine.core.config import Settings, settings
from profile_engine.core.errors import APIError, to_api_error
from profile_engine.core.logging import configure_logging
from profile_engine.core.responses import ErrorDetail, ErrorResponse
from profile_engine.providers.factory import create_draft_store
from profile_engine.providers.submission.memory_adapter import InMemoryProfileSubmitter
from profile_engine.services.profile_errors import ProfileEngineError
from profile_engine.services.session_registry import ProfileSessionRegistry

logger = structlog.get_logger()


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors.

    Args:
        request: The incoming request.
        exc: The APIError that was raised.

    Returns:
        JSONResponse with error envelope and appropriate status code.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ).model_dump(),
    )


def profile_engine_error_handler(
    request: Request, exc: ProfileEngineError
) -> JSONResponse:
    """Translate completion engine errors into the API error envelope.

    Args:
        request: The incoming request.
        exc: Domain error raised by the engine.

    Returns:
        JSONResponse from the mapped APIError.
    """
    logger.info(
        "Profile engine error",
        code=exc.code,
        path=str(request.url.path),
    )
    return api_error_handler(request, to_api_error(exc))


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors from FastAPI.

    Converts FastAPI's validation errors to our standard format.

    Args:
        request: The incoming request.
        exc: The RequestValidationError from Pydantic.

    Returns:
        JSONResponse with VALIDATION_ERROR code and field-level details.
    """
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details=[
                    {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                    for e in exc.errors()
                ],
            )
        ).model_dump(),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    WHY: Never expose internal error details to clients. Log for debugging.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        JSONResponse with generic error message (500).
    """
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
            )
        ).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close every open profile session on shutdown."""
    yield
    closed = app.state.session_registry.close_all()
    logger.info("Profile sessions closed", count=closed)


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    WHY FACTORY FUNCTION:
    - Enables testing with different configurations
    - Each app gets its own session registry and draft store
    - Standard FastAPI pattern

    Args:
        config: Settings to use. Defaults to the environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or settings
    configure_logging(config.log_level, json_output=config.environment == "production")

    app = FastAPI(
        title="Profile Completion Engine API",
        version="1.0.0",
        description="Multi-page profile wizard with contact verification and auto-save",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.session_registry = ProfileSessionRegistry(config.session_ttl_minutes)
    app.state.draft_store = create_draft_store(config)
    app.state.submitter = InMemoryProfileSubmitter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", "Authorization", "X-Request-ID"],
    )

    # Register exception handlers
    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(ProfileEngineError, profile_engine_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    # Include v1 router at /api/v1
    app.include_router(v1_router, prefix="/api/v1")

    # Health check endpoint (outside versioned API)
    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring.

        Returns:
            {"status": "healthy"} if service is running.
        """
        return {"status": "healthy"}

    return app


# Create the application instance
# Used by uvicorn: uvicorn profile_engine.main:app
app = create_app()
