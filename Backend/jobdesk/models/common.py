# =============================================================================
# Common Models
# =============================================================================
"""
Pydantic models shared by every API route.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error body returned by all API routes.

    Attributes:
        error: Human-readable message safe to show to the user.
        code: Machine-readable error code, when one applies.
        warnings: Advice on how the user can recover.
    """

    error: str = Field(
        description="Human-readable error message"
    )
    code: Optional[str] = Field(
        default=None,
        description="Machine-readable error code"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Recovery hints for the user"
    )
