# =============================================================================
# Job Description Fetcher Package
# =============================================================================
"""
Guarded fetching of job posting URLs.

Usage:
    from jobdesk.services.fetcher import FetchError, FetchLimits, JDFetchGuard

    async with JDFetchGuard(FetchLimits()) as guard:
        posting = await guard.fetch_jd("https://jobs.example.com/posting/42")
"""

from jobdesk.services.fetcher.address import check_host, is_blocked_address, resolve_host
from jobdesk.services.fetcher.errors import FetchError, FetchErrorKind
from jobdesk.services.fetcher.guard import (
    FetchedPosting,
    FetchLimits,
    JDFetchGuard,
    validate_url,
)

__all__ = [
    "FetchError",
    "FetchErrorKind",
    "FetchLimits",
    "FetchedPosting",
    "JDFetchGuard",
    "check_host",
    "is_blocked_address",
    "resolve_host",
    "validate_url",
]
