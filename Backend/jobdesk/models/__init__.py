# =============================================================================
# Models Package
# =============================================================================
"""
Pydantic models and API schemas for the JobDesk backend.

This package contains Pydantic models used for:
- API request/response validation
- OpenAPI documentation generation

Usage:
    from jobdesk.models import ErrorResponse, JDFromURLRequest, JDFromURLResponse
"""

from jobdesk.models.common import ErrorResponse
from jobdesk.models.company_research import (
    CompanyResearchReport,
    CompanyResearchRequest,
    CompanyResearchResponse,
)
from jobdesk.models.cover_letter import CoverLetterRequest, CoverLetterResponse
from jobdesk.models.jd import JDFromURLRequest, JDFromURLResponse
from jobdesk.models.resume import ResumeExtractResponse, ResumeMeta
from jobdesk.models.system import HealthStatus, LLMHealthStatus, StatsResponse


__all__ = [
    "ErrorResponse",
    # Company research models
    "CompanyResearchReport",
    "CompanyResearchRequest",
    "CompanyResearchResponse",
    # Cover letter models
    "CoverLetterRequest",
    "CoverLetterResponse",
    # Job description models
    "JDFromURLRequest",
    "JDFromURLResponse",
    # Résumé models
    "ResumeExtractResponse",
    "ResumeMeta",
    # System models
    "HealthStatus",
    "LLMHealthStatus",
    "StatsResponse",
]
