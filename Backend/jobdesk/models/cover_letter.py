# =============================================================================
# Cover Letter Models
# =============================================================================
"""
Pydantic models for cover letter generation.
"""

from pydantic import BaseModel, Field


class CoverLetterRequest(BaseModel):
    """
    Request payload for cover letter generation.

    Blank and oversized inputs are rejected by the route so the user gets a
    specific message rather than a schema error.

    Attributes:
        resume: Résumé text.
        jd: Job description text.
    """

    resume: str = Field(
        default="",
        description="Résumé text"
    )
    jd: str = Field(
        default="",
        description="Job description text"
    )


class CoverLetterResponse(BaseModel):
    """
    Generated cover letter.

    Attributes:
        letter: Letter body in three paragraphs.
    """

    letter: str = Field(
        description="Letter body in three paragraphs"
    )
