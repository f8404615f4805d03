# =============================================================================
# FastAPI Application Entry Point
# =============================================================================
"""
Main FastAPI application for the JobDesk backend.

This module creates and configures the FastAPI application instance,
including middleware, routes, and exception handlers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobdesk import __version__
from jobdesk.api.routes import company_research, cover_letter, health, jd, resume, stats
from jobdesk.config import get_settings
from jobdesk.models import ErrorResponse
from jobdesk.services.analytics import EventCounter
from jobdesk.services.completion import AnthropicCompletionService


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Lifespan Management
# -----------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifespan events.

    Handles startup and shutdown procedures including:
    - Completion client initialization
    - Usage event counter initialization
    - Resource cleanup on shutdown

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    # Startup
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
    logger.info(f"Debug mode: {settings.debug}")

    # -------------------------------------------------------------------------
    # Initialize Completion Client
    # -------------------------------------------------------------------------
    app.state.completion = None
    app.state.research_completion = None
    if settings.anthropic_api_key:
        app.state.completion = AnthropicCompletionService(
            api_key=settings.anthropic_api_key,
            model=settings.claude_model,
            max_tokens=settings.completion_max_tokens,
            timeout=settings.completion_timeout_seconds,
        )
        app.state.research_completion = AnthropicCompletionService(
            api_key=settings.anthropic_api_key,
            model=settings.claude_model,
            max_tokens=settings.research_max_tokens,
            timeout=settings.research_timeout_seconds,
        )
        logger.info(f"Completion clients initialized for {settings.claude_model}")
    else:
        logger.warning(
            "ANTHROPIC_API_KEY not set. Cover letters and company research will be unavailable."
        )

    # -------------------------------------------------------------------------
    # Initialize Event Counter
    # -------------------------------------------------------------------------
    event_counter = EventCounter.from_settings(settings)
    app.state.event_counter = event_counter
    if not settings.posthog_project_key:
        logger.info("PostHog not configured. Usage events will not be recorded.")

    yield

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------
    logger.info("Shutting down application...")
    await event_counter.close()
    for completion in (app.state.completion, app.state.research_completion):
        if completion is not None:
            await completion.close()
    logger.info("Clients closed")


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="JobDesk API",
        description=(
            "Backend for the JobDesk job application toolkit. Imports job "
            "descriptions from public URLs, extracts résumé text from uploads, "
            "drafts cover letters and researches companies."
        ),
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan
    )

    # -------------------------------------------------------------------------
    # Middleware Configuration
    # -------------------------------------------------------------------------

    # Any origin in development, explicit allow-list in production
    if settings.is_production:
        allow_origins = settings.allowed_origins_list
    else:
        allow_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-PH-Distinct-Id"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """
        Report malformed request bodies with the standard error body.

        Args:
            request: The incoming request.
            exc: The validation error raised by FastAPI.

        Returns:
            400 response naming the first invalid field.
        """
        errors = exc.errors()
        detail = "Invalid request"
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            detail = f"Invalid request: {field} {first.get('msg', '')}".strip()
        logger.info(f"Rejected {request.method} {request.url.path}: {detail}")

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=detail, code="invalid_request").model_dump(),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """
        Global exception handler for unhandled exceptions.

        Args:
            request: The incoming request.
            exc: The unhandled exception.

        Returns:
            JSON response with a generic error body.
        """
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Server error",
                "code": "internal_server_error",
                "warnings": [],
            }
        )

    # -------------------------------------------------------------------------
    # Route Registration
    # -------------------------------------------------------------------------

    # Health check routes
    app.include_router(health.router)

    # Feature routes
    app.include_router(jd.router, prefix="/api")
    app.include_router(resume.router, prefix="/api")
    app.include_router(cover_letter.router, prefix="/api")
    app.include_router(company_research.router, prefix="/api")
    app.include_router(stats.router, prefix="/api")

    # -------------------------------------------------------------------------
    # Root Endpoint
    # -------------------------------------------------------------------------

    @app.get("/", tags=["Root"])
    async def root() -> dict:
        """
        Root endpoint providing API information.

        Returns:
            Dictionary with API information and links.
        """
        return {
            "name": "JobDesk API",
            "version": __version__,
            "status": "running",
            "docs": "/docs" if settings.debug else "disabled",
            "health": "/health"
        }

    return app


# -----------------------------------------------------------------------------
# Application Instance
# -----------------------------------------------------------------------------
app = create_app()


# -----------------------------------------------------------------------------
# Development Server Entry Point
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "jobdesk.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
