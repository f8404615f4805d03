# =============================================================================
# Health Check Routes
# =============================================================================
"""
Health check endpoints for monitoring and container orchestration.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from jobdesk import __version__
from jobdesk.api.dependencies import SettingsDep
from jobdesk.models import HealthStatus, LLMHealthStatus
from jobdesk.services.llm_health import check_llm_health


# -----------------------------------------------------------------------------
# Router Setup
# -----------------------------------------------------------------------------
router = APIRouter(prefix="/health", tags=["Health"])


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
@router.get(
    "",
    response_model=HealthStatus,
    summary="Basic Health Check",
    description="Returns basic health status for container orchestration."
)
async def health_check(settings: SettingsDep) -> HealthStatus:
    """
    Perform a basic health check.

    This endpoint is used by Docker health checks and load balancers
    to verify the service is running.

    Returns:
        HealthStatus: Basic health status information.
    """
    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.app_env
    )


@router.get(
    "/llm",
    response_model=LLMHealthStatus,
    summary="LLM Provider Health Check",
    description="Checks that the configured API key is accepted by the provider."
)
async def llm_health_check(settings: SettingsDep) -> LLMHealthStatus:
    """
    Probe the LLM provider with the configured key.

    Returns:
        LLMHealthStatus: Reachability and key status. Always 200; inspect ``ok``.
    """
    health = await check_llm_health(settings.anthropic_api_key, settings.claude_model)
    return LLMHealthStatus(**health.to_dict())
