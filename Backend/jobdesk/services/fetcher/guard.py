# =============================================================================
# Job Description Fetch Guard
# =============================================================================
"""
SSRF-hardened fetch of a job posting URL.

Validates the URL and its resolved address before any request is made,
follows redirects manually under a hop cap, enforces one time budget for
the whole operation, and streams the body against a byte ceiling before
handing the page to the extraction pipeline.

Usage:
    from jobdesk.services.fetcher import FetchLimits, JDFetchGuard

    async with JDFetchGuard(FetchLimits()) as guard:
        posting = await guard.fetch_jd("https://jobs.example.com/posting/42")
        print(posting.host, posting.result.source.wire_name)
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urldefrag, urljoin, urlparse

import httpx

from jobdesk.config import Settings
from jobdesk.services.extraction import ExtractionResult, extract_jd
from jobdesk.services.fetcher.address import Resolver, check_host, resolve_host
from jobdesk.services.fetcher.errors import FetchError, FetchErrorKind


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
DEFAULT_USER_AGENT = "JobDeskBot/0.1 (job description import; single page fetch)"
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})
ACCEPTED_CONTENT_TYPES = ("text/html", "application/ld+json")
ACCEPT_HEADER = "text/html,application/xhtml+xml,application/ld+json;q=0.9,*/*;q=0.1"


# -----------------------------------------------------------------------------
# Configuration and State
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class FetchLimits:
    """
    Limits applied to a single URL import.

    Attributes:
        timeout_seconds: Time budget for all hops together.
        max_response_bytes: Ceiling on the decoded response body.
        max_redirects: Maximum number of redirects followed.
        min_text_chars: Minimum extracted text length for a usable result.
        user_agent: User-Agent header sent with every request.
    """

    timeout_seconds: float = 10.0
    max_response_bytes: int = 3 * 1024 * 1024
    max_redirects: int = 5
    min_text_chars: int = 50
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_settings(cls, settings: Settings) -> "FetchLimits":
        """Build limits from application settings."""
        return cls(
            timeout_seconds=settings.jd_fetch_timeout_seconds,
            max_response_bytes=settings.jd_max_response_bytes,
            max_redirects=settings.jd_max_redirects,
            min_text_chars=settings.jd_min_text_chars,
            user_agent=settings.jd_user_agent,
        )


@dataclass
class FetchOutcome:
    """
    Mutable state of one URL import.

    Attributes:
        current_url: URL of the hop being fetched.
        visited: Absolute URLs already requested, in any order.
        bytes_read: Body bytes accepted so far.
        started_at: Monotonic start time, for logging.
    """

    current_url: str
    visited: set[str] = field(default_factory=set)
    bytes_read: int = 0
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.started_at) * 1000


@dataclass(frozen=True)
class FetchedPosting:
    """
    Successful URL import.

    Attributes:
        result: Extracted job description.
        final_url: URL the content was served from, after redirects.
        bytes_read: Size of the decoded body.
    """

    result: ExtractionResult
    final_url: str
    bytes_read: int

    @property
    def host(self) -> str:
        return urlparse(self.final_url).hostname or ""


# -----------------------------------------------------------------------------
# URL Validation
# -----------------------------------------------------------------------------
def validate_url(url: str) -> str:
    """
    Validate a user-supplied URL before any network access.

    Args:
        url: URL string to validate.

    Returns:
        The URL without surrounding whitespace or fragment.

    Raises:
        FetchError: ``invalid_url`` if the URL cannot be parsed or lacks a
            scheme or host, ``unsupported_scheme`` if it is not https.
    """
    candidate = (url or "").strip()
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
        parsed.port  # raises ValueError for malformed ports
    except ValueError as e:
        raise FetchError(FetchErrorKind.INVALID_URL, "Invalid URL") from e

    if not parsed.scheme or not hostname:
        raise FetchError(FetchErrorKind.INVALID_URL, "Invalid URL")
    if parsed.scheme.lower() != "https":
        raise FetchError(FetchErrorKind.UNSUPPORTED_SCHEME, "Only https URLs are supported")

    return urldefrag(candidate).url


# -----------------------------------------------------------------------------
# Fetch Guard Class
# -----------------------------------------------------------------------------
class JDFetchGuard:
    """
    Fetches job posting pages under SSRF, redirect and size limits.

    Attributes:
        limits: Limits applied to every import.
        http_client: Async HTTP client used for requests.
        resolver: Coroutine resolving a hostname to one address.
    """

    def __init__(
        self,
        limits: Optional[FetchLimits] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        resolver: Resolver = resolve_host,
    ) -> None:
        """
        Initialize the fetch guard.

        Args:
            limits: Import limits; defaults to ``FetchLimits()``.
            http_client: Optional pre-configured httpx client.
            resolver: Hostname resolver, injectable for tests.
        """
        self.limits = limits or FetchLimits()
        self._owned_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.limits.timeout_seconds,
            follow_redirects=False,
        )
        self.resolver = resolver

    async def close(self) -> None:
        """Close the HTTP client if owned by this guard."""
        if self._owned_client and self.http_client:
            await self.http_client.aclose()
            logger.debug("HTTP client closed")

    async def __aenter__(self) -> "JDFetchGuard":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Public Methods
    # -------------------------------------------------------------------------
    async def fetch_jd(self, url: str) -> FetchedPosting:
        """
        Fetch a job posting URL and extract its description.

        Args:
            url: https URL of the job posting.

        Returns:
            The extracted posting and the final URL it was served from.

        Raises:
            FetchError: For every failure; see ``FetchErrorKind``.
        """
        target = validate_url(url)
        await check_host(urlparse(target).hostname, self.resolver)

        outcome = FetchOutcome(current_url=target)
        logger.info(f"Importing job description from {target}")

        try:
            async with asyncio.timeout(self.limits.timeout_seconds):
                body = await self._follow(outcome)
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning(f"Import of {target} timed out after {outcome.elapsed_ms:.0f}ms")
            raise FetchError(FetchErrorKind.TIMEOUT, "The job posting took too long to load") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Import of {outcome.current_url} failed: {e}")
            raise FetchError(FetchErrorKind.FETCH_FAILED, "Could not fetch the job posting") from e

        html = body.decode("utf-8", errors="replace")
        result = extract_jd(html, outcome.current_url)

        if len(result.text) < self.limits.min_text_chars:
            logger.warning(
                f"Only {len(result.text)} chars extracted from {outcome.current_url}"
            )
            raise FetchError(
                FetchErrorKind.NO_EXTRACTABLE_TEXT,
                "Could not find job description text on this page",
            )

        logger.info(
            f"Imported {len(result.text)} chars via {result.source.value} from "
            f"{outcome.current_url} ({outcome.bytes_read} bytes, {outcome.elapsed_ms:.0f}ms)"
        )
        return FetchedPosting(
            result=result,
            final_url=outcome.current_url,
            bytes_read=outcome.bytes_read,
        )

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------
    async def _follow(self, outcome: FetchOutcome) -> bytes:
        """
        Follow redirects until a 2xx response and return its body.

        Args:
            outcome: Fetch state, updated in place.

        Returns:
            The raw body of the final response.

        Raises:
            FetchError: On redirect, status, content type or size failures.
        """
        for _ in range(self.limits.max_redirects + 1):
            current = outcome.current_url
            if current in outcome.visited:
                logger.warning(f"Redirect loop detected at {current}")
                raise FetchError(FetchErrorKind.REDIRECT_LOOP, "The page redirects in a loop")
            outcome.visited.add(current)

            async with self.http_client.stream(
                "GET",
                current,
                headers={"User-Agent": self.limits.user_agent, "Accept": ACCEPT_HEADER},
                follow_redirects=False,
            ) as response:
                if response.status_code in REDIRECT_STATUSES:
                    outcome.current_url = await self._next_hop(current, response)
                    continue

                if not response.is_success:
                    raise FetchError(
                        FetchErrorKind.FETCH_FAILED,
                        f"The job posting returned HTTP {response.status_code}",
                        upstream_status=response.status_code,
                    )

                self._check_content_type(response)
                return await self._read_body(response, outcome)

        logger.warning(f"Too many redirects, last hop {outcome.current_url}")
        raise FetchError(FetchErrorKind.TOO_MANY_REDIRECTS, "The page redirects too many times")

    async def _next_hop(self, current: str, response: httpx.Response) -> str:
        """Resolve and validate the target of a redirect response."""
        location = response.headers.get("location")
        if not location:
            raise FetchError(
                FetchErrorKind.REDIRECT_NO_LOCATION,
                "The page redirected without a destination",
                upstream_status=response.status_code,
            )

        next_url = urldefrag(urljoin(current, location.strip())).url
        parsed = urlparse(next_url)
        if parsed.scheme.lower() != "https":
            logger.warning(f"Refusing redirect from {current} to {parsed.scheme} URL")
            raise FetchError(
                FetchErrorKind.REDIRECT_DOWNGRADED,
                "The page redirected to a non-https URL",
            )
        if not parsed.hostname:
            raise FetchError(
                FetchErrorKind.FETCH_FAILED,
                "The page redirected to an invalid URL",
                upstream_status=response.status_code,
            )

        await check_host(parsed.hostname, self.resolver)
        logger.debug(f"Following {response.status_code} redirect to {next_url}")
        return next_url

    @staticmethod
    def _check_content_type(response: httpx.Response) -> None:
        content_type = response.headers.get("content-type", "").lower()
        if not any(accepted in content_type for accepted in ACCEPTED_CONTENT_TYPES):
            logger.warning(f"Rejected content type {content_type!r} from {response.url}")
            raise FetchError(
                FetchErrorKind.UNSUPPORTED_CONTENT_TYPE,
                "The URL does not point to an HTML page",
            )

    async def _read_body(self, response: httpx.Response, outcome: FetchOutcome) -> bytes:
        """
        Stream the response body, aborting as soon as it exceeds the ceiling.

        Counts decoded bytes, so compressed bodies are limited by their
        expanded size.
        """
        ceiling = self.limits.max_response_bytes
        too_large = FetchError(FetchErrorKind.RESPONSE_TOO_LARGE, "The job posting page is too large")

        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > ceiling:
            raise too_large

        body = bytearray()
        async for chunk in response.aiter_bytes():
            if outcome.bytes_read + len(chunk) > ceiling:
                logger.warning(f"Response from {outcome.current_url} exceeded {ceiling} bytes")
                raise too_large
            outcome.bytes_read += len(chunk)
            body.extend(chunk)

        return bytes(body)
