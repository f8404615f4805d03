# =============================================================================
# Job Description Import Models
# =============================================================================
"""
Pydantic models for importing a job description from a URL.
"""

from typing import Literal

from pydantic import BaseModel, Field


class JDFromURLRequest(BaseModel):
    """
    Request payload for the job description import endpoint.

    Attributes:
        url: Public https URL of the job posting.
    """

    url: str = Field(
        default="",
        max_length=2048,
        description="Public https URL of the job posting"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"url": "https://jobs.example.com/postings/senior-engineer"}
            ]
        }
    }


class JDFromURLResponse(BaseModel):
    """
    Extracted job description.

    Attributes:
        text: Normalized job description text.
        source: Extraction strategy that produced the text.
        host: Host of the final URL after redirects.
        warnings: Notes for the user about the extraction quality.
    """

    text: str = Field(
        description="Normalized job description text"
    )
    source: Literal["jsonld", "readability", "heuristics"] = Field(
        description="Extraction strategy that produced the text"
    )
    host: str = Field(
        description="Host of the final URL after redirects"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Notes about the extraction quality"
    )
