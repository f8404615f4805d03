# =============================================================================
# Résumé Upload Models
# =============================================================================
"""
Pydantic models for résumé text extraction responses.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ResumeMeta(BaseModel):
    """Facts about the extracted document."""

    chars: int = Field(
        description="Length of the extracted text"
    )
    pages: Optional[int] = Field(
        default=None,
        description="Page count, for PDFs"
    )


class ResumeExtractResponse(BaseModel):
    """
    Text extracted from an uploaded résumé.

    Attributes:
        text: Cleaned résumé text, possibly empty.
        warnings: Notes for the user, e.g. when a PDF has no text layer.
        meta: Character and page counts.
    """

    text: str = Field(
        description="Cleaned résumé text"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Notes for the user"
    )
    meta: ResumeMeta = Field(
        description="Document facts"
    )
