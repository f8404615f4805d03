# =============================================================================
# Job Description Import Routes
# =============================================================================
"""
API route for importing a job description from a public URL.

All endpoints are prefixed with /api when registered.

Usage:
    from jobdesk.api.routes import jd
    app.include_router(jd.router, prefix="/api")
"""

import asyncio
import logging
from typing import Annotated, Any, Awaitable, Optional, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from jobdesk.api.dependencies import get_jd_fetch_guard
from jobdesk.models import ErrorResponse, JDFromURLRequest, JDFromURLResponse
from jobdesk.services.extraction import ExtractionSource
from jobdesk.services.fetcher import FetchError, FetchErrorKind, JDFetchGuard


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Router Configuration
# -----------------------------------------------------------------------------
router = APIRouter(tags=["Job Descriptions"])


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
DISCONNECT_POLL_SECONDS = 0.25
CLIENT_CLOSED_REQUEST = 499

HEURISTIC_WARNING = "Extracted with heuristics. Please review the text before using it."
MANUAL_PASTE_WARNING = "Paste the job description text manually instead."

STATUS_BY_KIND: dict[FetchErrorKind, int] = {
    FetchErrorKind.INVALID_URL: status.HTTP_400_BAD_REQUEST,
    FetchErrorKind.UNSUPPORTED_SCHEME: status.HTTP_400_BAD_REQUEST,
    FetchErrorKind.DNS_FAILED: status.HTTP_400_BAD_REQUEST,
    FetchErrorKind.UNSUPPORTED_ADDRESS: status.HTTP_400_BAD_REQUEST,
    FetchErrorKind.REDIRECT_LOOP: status.HTTP_400_BAD_REQUEST,
    FetchErrorKind.TOO_MANY_REDIRECTS: status.HTTP_400_BAD_REQUEST,
    FetchErrorKind.REDIRECT_DOWNGRADED: status.HTTP_400_BAD_REQUEST,
    FetchErrorKind.REDIRECT_NO_LOCATION: status.HTTP_502_BAD_GATEWAY,
    FetchErrorKind.FETCH_FAILED: status.HTTP_502_BAD_GATEWAY,
    FetchErrorKind.UNSUPPORTED_CONTENT_TYPE: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    FetchErrorKind.RESPONSE_TOO_LARGE: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    FetchErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    FetchErrorKind.NO_EXTRACTABLE_TEXT: status.HTTP_422_UNPROCESSABLE_ENTITY,
}

T = TypeVar("T")


class ClientDisconnectedError(Exception):
    """The client went away before the response was ready."""

    pass


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
async def run_until_disconnect(request: Request, awaitable: Awaitable[T]) -> T:
    """
    Run a coroutine, cancelling it if the client disconnects first.

    Args:
        request: The incoming request to watch.
        awaitable: Coroutine to run as a task.

    Returns:
        The coroutine's result.

    Raises:
        ClientDisconnectedError: If the client disconnected and the task was cancelled.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnectedError()
    finally:
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)


def fetch_error_response(error: FetchError) -> JSONResponse:
    """Map a FetchError to its HTTP status and error body."""
    warnings: list[str] = []
    if error.kind is FetchErrorKind.NO_EXTRACTABLE_TEXT:
        warnings.append(MANUAL_PASTE_WARNING)

    body = ErrorResponse(error=error.message, code=error.kind.value, warnings=warnings)
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(error.kind, status.HTTP_502_BAD_GATEWAY),
        content=body.model_dump(),
    )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
@router.post(
    "/jd-from-url",
    response_model=JDFromURLResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Import a job description from a URL",
)
async def jd_from_url(
    payload: JDFromURLRequest,
    request: Request,
    guard: Annotated[JDFetchGuard, Depends(get_jd_fetch_guard)],
) -> Any:
    """
    Fetch a public job posting and return its description text.

    Only https URLs resolving to public addresses are fetched. The response
    names the extraction strategy that produced the text.

    Args:
        payload: Request body with the posting URL.
        request: Incoming request, watched for client disconnects.
        guard: Fetch guard for this request.

    Returns:
        JDFromURLResponse on success, or an ErrorResponse JSON body.
    """
    try:
        posting = await run_until_disconnect(request, guard.fetch_jd(payload.url))
    except FetchError as e:
        logger.info(f"JD import rejected: {e.kind.value}: {e.message}")
        return fetch_error_response(e)
    except ClientDisconnectedError:
        logger.info("Client disconnected, JD import cancelled")
        return JSONResponse(
            status_code=CLIENT_CLOSED_REQUEST,
            content=ErrorResponse(error="Client closed request", code="client_closed").model_dump(),
        )

    warnings: list[str] = []
    if posting.result.source is ExtractionSource.HEURISTIC:
        warnings.append(HEURISTIC_WARNING)

    return JDFromURLResponse(
        text=posting.result.text,
        source=posting.result.source.wire_name,
        host=posting.host,
        warnings=warnings,
    )
