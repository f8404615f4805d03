# =============================================================================
# Cover Letter Routes
# =============================================================================
"""
API route for drafting a cover letter from a résumé and job description.

All endpoints are prefixed with /api when registered.
"""

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, status
from fastapi.responses import JSONResponse

from jobdesk.api.dependencies import SettingsDep, get_cover_letter_service, get_event_counter
from jobdesk.models import CoverLetterRequest, CoverLetterResponse, ErrorResponse
from jobdesk.services.analytics import COVER_LETTER_GENERATED, EventCounter
from jobdesk.services.completion import (
    CompletionError,
    CompletionTimeoutError,
    CoverLetterRejectedError,
    CoverLetterService,
)


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Router Configuration
# -----------------------------------------------------------------------------
router = APIRouter(prefix="/cover-letter", tags=["Cover Letter"])


def _error(status_code: int, message: str, code: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code).model_dump(),
    )


@router.post(
    "/generate",
    response_model=CoverLetterResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Draft a three-paragraph cover letter",
)
async def generate_cover_letter(
    payload: CoverLetterRequest,
    background_tasks: BackgroundTasks,
    settings: SettingsDep,
    service: Annotated[Optional[CoverLetterService], Depends(get_cover_letter_service)],
    counter: Annotated[EventCounter, Depends(get_event_counter)],
    x_ph_distinct_id: Annotated[Optional[str], Header()] = None,
) -> Any:
    """
    Draft a cover letter grounded in the supplied résumé and job description.

    Args:
        payload: Résumé and job description text.
        background_tasks: Used to record the usage event after responding.
        settings: Application settings.
        service: Cover letter service, None when no API key is configured.
        counter: Usage event counter.
        x_ph_distinct_id: Analytics identity forwarded by the browser.

    Returns:
        CoverLetterResponse on success, or an ErrorResponse JSON body.
    """
    if service is None:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Cover letter generation is not configured")

    if not payload.resume.strip() or not payload.jd.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Both resume and jd are required.")

    limit = settings.max_input_chars
    if len(payload.resume) > limit or len(payload.jd) > limit:
        return _error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Input too long (max {limit:,} chars each).",
        )

    try:
        letter = await service.generate(payload.resume, payload.jd)
    except CoverLetterRejectedError as e:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, e.message, e.code)
    except CompletionTimeoutError:
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "Provider timeout")
    except CompletionError as e:
        logger.error(f"Cover letter generation failed: {e}")
        return _error(status.HTTP_502_BAD_GATEWAY, "Generation failed")

    if not letter.strip():
        return _error(status.HTTP_502_BAD_GATEWAY, "Empty model response")

    background_tasks.add_task(
        counter.record,
        COVER_LETTER_GENERATED,
        {"channel": "server"},
        x_ph_distinct_id,
    )
    return CoverLetterResponse(letter=letter)
