# =============================================================================
# Company Research Routes
# =============================================================================
"""
API route for researching a company ahead of an application.

All endpoints are prefixed with /api when registered.
"""

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, status
from fastapi.responses import JSONResponse

from jobdesk.api.dependencies import SettingsDep, get_company_research_service, get_event_counter
from jobdesk.models import CompanyResearchRequest, CompanyResearchResponse, ErrorResponse
from jobdesk.services.analytics import COMPANY_RESEARCH_GENERATED, EventCounter
from jobdesk.services.completion import (
    CompanyResearchService,
    CompletionError,
    CompletionTimeoutError,
)


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Router Configuration
# -----------------------------------------------------------------------------
router = APIRouter(tags=["Company Research"])


def _error(status_code: int, message: str, code: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, code=code).model_dump(),
    )


def _long_fields(payload: CompanyResearchRequest, limit: int) -> list[str]:
    """Names of free-text fields longer than ``limit`` characters."""
    candidates = {
        "role_details.jd_text": payload.role_details.jd_text if payload.role_details else None,
        "company_hints.notes": payload.company_hints.notes if payload.company_hints else None,
    }
    return [name for name, value in candidates.items() if value and len(value) > limit]


@router.post(
    "/company-research",
    response_model=CompanyResearchResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Research a company for a job application",
)
async def research_company(
    payload: CompanyResearchRequest,
    background_tasks: BackgroundTasks,
    settings: SettingsDep,
    service: Annotated[Optional[CompanyResearchService], Depends(get_company_research_service)],
    counter: Annotated[EventCounter, Depends(get_event_counter)],
    x_ph_distinct_id: Annotated[Optional[str], Header()] = None,
) -> Any:
    """
    Produce a Markdown report and a structured summary for a company.

    The structured summary is omitted, with a warning, when the model's JSON
    is missing or does not match the report schema.

    Args:
        payload: Company name with optional role details and hints.
        background_tasks: Used to record the usage event after responding.
        settings: Application settings.
        service: Research service, None when no API key is configured.
        counter: Usage event counter.
        x_ph_distinct_id: Analytics identity forwarded by the browser.

    Returns:
        CompanyResearchResponse on success, or an ErrorResponse JSON body.
    """
    if service is None:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Company research is not configured")

    if not payload.company.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Company is required.")

    limit = settings.max_input_chars
    too_long = _long_fields(payload, limit)
    if too_long:
        return _error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Input too long (max {limit:,} chars): {', '.join(too_long)}.",
        )

    try:
        result = await service.research(payload)
    except CompletionTimeoutError:
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "Provider timeout")
    except CompletionError as e:
        logger.error(f"Company research failed: {e}")
        return _error(status.HTTP_502_BAD_GATEWAY, "Research failed")

    if not result.markdown and result.report is None:
        return _error(status.HTTP_502_BAD_GATEWAY, "Empty model response")

    background_tasks.add_task(
        counter.record,
        COMPANY_RESEARCH_GENERATED,
        {"channel": "server"},
        x_ph_distinct_id,
    )
    return CompanyResearchResponse(
        markdown=result.markdown,
        research_json=result.report,
        warnings=result.warnings,
    )
