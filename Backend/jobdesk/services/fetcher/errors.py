# =============================================================================
# Fetch Errors
# =============================================================================
"""
Failure taxonomy for importing a job description from a URL.

Every failure carries a distinct kind so the API can tell the user whether
to try another URL or paste the posting text manually.
"""

from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    """Distinct, caller-visible reasons a URL import can fail."""

    # Input errors
    INVALID_URL = "invalid_url"
    UNSUPPORTED_SCHEME = "unsupported_scheme"

    # Address policy
    DNS_FAILED = "dns_failed"
    UNSUPPORTED_ADDRESS = "unsupported_address"

    # Redirect handling
    REDIRECT_LOOP = "redirect_loop"
    REDIRECT_NO_LOCATION = "redirect_no_location"
    REDIRECT_DOWNGRADED = "redirect_downgraded"
    TOO_MANY_REDIRECTS = "too_many_redirects"

    # Upstream response
    FETCH_FAILED = "fetch_failed"
    UNSUPPORTED_CONTENT_TYPE = "unsupported_content_type"
    RESPONSE_TOO_LARGE = "response_too_large"
    TIMEOUT = "timeout"

    # Degenerate content
    NO_EXTRACTABLE_TEXT = "no_extractable_text"


class FetchError(Exception):
    """
    A URL import failed.

    Attributes:
        kind: Machine-readable failure kind.
        message: Human-readable message safe to show to the user.
        upstream_status: HTTP status returned by the remote server, if any.
    """

    def __init__(
        self,
        kind: FetchErrorKind,
        message: str,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.upstream_status = upstream_status

    def __repr__(self) -> str:
        return f"FetchError(kind={self.kind.value!r}, message={self.message!r})"
