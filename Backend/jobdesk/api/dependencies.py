# =============================================================================
# API Dependencies
# =============================================================================
"""
FastAPI dependency providers for the service layer.

Long-lived collaborators (the completion clients and the event counter) are
created in the application lifespan and read from ``app.state``; the fetch
guard and the résumé service are cheap and built per request.
"""

import logging
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, Request

from jobdesk.config import Settings, get_settings
from jobdesk.services.analytics import EventCounter
from jobdesk.services.completion import CompanyResearchService, CoverLetterService
from jobdesk.services.documents import ResumeTextService
from jobdesk.services.fetcher import FetchLimits, JDFetchGuard


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_jd_fetch_guard(settings: SettingsDep) -> AsyncGenerator[JDFetchGuard, None]:
    """Yield a fetch guard configured from settings, closed after the request."""
    async with JDFetchGuard(FetchLimits.from_settings(settings)) as guard:
        yield guard


def get_resume_service(settings: SettingsDep) -> ResumeTextService:
    """Get a ResumeTextService with the configured upload limit."""
    return ResumeTextService(max_upload_bytes=settings.upload_max_bytes)


def get_cover_letter_service(request: Request) -> Optional[CoverLetterService]:
    """
    Get the cover letter service, or None when no API key is configured.

    Args:
        request: Incoming request, used to reach application state.

    Returns:
        CoverLetterService bound to the shared completion client, or None.
    """
    completion = getattr(request.app.state, "completion", None)
    if completion is None:
        return None
    return CoverLetterService(completion)


def get_event_counter(request: Request) -> EventCounter:
    """Get the shared usage event counter."""
    return request.app.state.event_counter


def get_company_research_service(request: Request) -> Optional[CompanyResearchService]:
    """Get the company research service, or None when no API key is configured."""
    completion = getattr(request.app.state, "research_completion", None)
    if completion is None:
        return None
    return CompanyResearchService(completion)
