# =============================================================================
# System Models
# =============================================================================
"""
Pydantic models for health and usage statistics endpoints.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    """
    Basic liveness response.

    Attributes:
        status: Current health status.
        timestamp: Time of the health check.
        version: Application version.
        environment: Current environment.
    """

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        description="Current health status"
    )
    timestamp: datetime = Field(
        description="Time of the health check"
    )
    version: str = Field(
        description="Application version"
    )
    environment: str = Field(
        description="Current environment"
    )


class LLMHealthStatus(BaseModel):
    """
    Result of probing the LLM provider with the configured key.
    """

    ok: bool = Field(description="Whether the provider accepted the key")
    provider: str = Field(description="LLM provider name")
    model: str = Field(description="Configured model")
    has_key: bool = Field(description="Whether an API key is configured")
    reachable: bool = Field(description="Whether the provider answered")
    auth: Literal["ok", "missing_key", "unauthorized", "forbidden", "unknown"] = Field(
        description="How the provider judged the key"
    )
    models_count: Optional[int] = Field(
        default=None,
        description="Number of models visible to the key"
    )
    status: Optional[int] = Field(
        default=None,
        description="Provider HTTP status"
    )


class StatsResponse(BaseModel):
    """
    Public usage counter.

    Attributes:
        total: Number of cover letters generated.
        env: Environment the count belongs to.
    """

    total: int = Field(
        description="Number of cover letters generated"
    )
    env: str = Field(
        description="Environment the count belongs to"
    )
