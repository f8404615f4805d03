# =============================================================================
# Usage Statistics Routes
# =============================================================================
"""
Public usage counter shown on the landing page.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from jobdesk.api.dependencies import SettingsDep, get_event_counter
from jobdesk.models import StatsResponse
from jobdesk.services.analytics import COVER_LETTER_GENERATED, EventCounter


router = APIRouter(tags=["Stats"])


@router.get("/stats", response_model=StatsResponse, summary="Cover letters generated")
async def get_stats(
    settings: SettingsDep,
    counter: Annotated[EventCounter, Depends(get_event_counter)],
) -> StatsResponse:
    """Return how many cover letters have been generated in this environment."""
    total = await counter.count_events(COVER_LETTER_GENERATED)
    return StatsResponse(total=total, env=settings.app_env)
