# =============================================================================
# Usage Event Counter
# =============================================================================
"""
Server-side usage events backed by PostHog.

Events are sent to PostHog's capture endpoint and counted with a HogQL query
against the project API. Analytics must never break a request, so every
failure is logged and swallowed; an unconfigured counter is a no-op that
reports zero.

Usage:
    from jobdesk.services.analytics import EventCounter

    counter = EventCounter.from_settings(get_settings())
    await counter.record("cover_letter_generated", {"channel": "server"}, distinct_id)
    total = await counter.count_events("cover_letter_generated")
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from jobdesk.config import Settings


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
DEFAULT_INGESTION_HOST = "https://us.i.posthog.com"
DEFAULT_API_HOST = "https://app.posthog.com"
DEFAULT_TIMEOUT = 5.0  # seconds

COVER_LETTER_GENERATED = "cover_letter_generated"
COMPANY_RESEARCH_GENERATED = "company_research_generated"


def _count_query(event: str) -> str:
    escaped = event.replace("\\", "\\\\").replace("'", "\\'")
    return f"SELECT count() AS total FROM events WHERE event = '{escaped}'"


def _parse_total(data: Any) -> int:
    """Pull the count out of a HogQL query response."""
    if not isinstance(data, dict):
        return 0
    results = data.get("results")
    value: Any = 0
    if isinstance(results, list) and results:
        first = results[0]
        if isinstance(first, list) and first:
            value = first[0]
        elif isinstance(first, dict):
            value = first.get("total", 0)
    elif isinstance(data.get("result"), (int, float)):
        value = data["result"]
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


# -----------------------------------------------------------------------------
# Event Counter Class
# -----------------------------------------------------------------------------
class EventCounter:
    """
    Records and counts usage events.

    Attributes:
        project_key: PostHog ingestion key. Capture is skipped when empty.
        project_id: PostHog project id used for queries.
        personal_api_key: PostHog personal API key used for queries.
        ingestion_host: Base URL for event capture.
        api_host: Base URL for the query API.
        cache_seconds: How long a count is reused.
    """

    def __init__(
        self,
        project_key: str = "",
        project_id: str = "",
        personal_api_key: str = "",
        ingestion_host: str = DEFAULT_INGESTION_HOST,
        api_host: str = DEFAULT_API_HOST,
        cache_seconds: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the event counter.

        Args:
            project_key: PostHog ingestion key.
            project_id: PostHog project id.
            personal_api_key: PostHog personal API key.
            ingestion_host: Base URL for event capture.
            api_host: Base URL for the query API.
            cache_seconds: TTL for cached counts.
            http_client: Optional shared HTTP client.
        """
        self.project_key = project_key
        self.project_id = project_id
        self.personal_api_key = personal_api_key
        self.ingestion_host = ingestion_host.rstrip("/")
        self.api_host = api_host.rstrip("/")
        self.cache_seconds = cache_seconds

        self._owned_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        self._cache: dict[str, tuple[float, int]] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "EventCounter":
        """Build a counter with the keys for the configured environment."""
        return cls(
            project_key=settings.posthog_project_key,
            project_id=settings.posthog_project_id,
            personal_api_key=settings.posthog_personal_api_key,
            ingestion_host=settings.posthog_ingestion_host,
            api_host=settings.posthog_api_host,
            cache_seconds=settings.stats_cache_seconds,
            http_client=http_client,
        )

    async def close(self) -> None:
        """Close the HTTP client if this counter created it."""
        if self._owned_client:
            await self._client.aclose()

    async def __aenter__(self) -> "EventCounter":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    def reset_cache(self) -> None:
        """Forget all cached counts."""
        self._cache.clear()

    async def record(
        self,
        event: str,
        properties: Optional[dict[str, Any]] = None,
        distinct_id: Optional[str] = None,
    ) -> None:
        """
        Send a usage event. Never raises.

        Args:
            event: Event name.
            properties: Extra event properties.
            distinct_id: Caller identity. A random server id is used when absent.
        """
        if not self.project_key:
            logger.debug(f"Analytics not configured, dropping event {event!r}")
            return

        identity = distinct_id or f"server-{uuid.uuid4().hex[:8]}"
        body: dict[str, Any] = {
            "api_key": self.project_key,
            "event": event,
            "properties": {**(properties or {}), "distinct_id": identity},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if distinct_id:
            body["distinct_id"] = distinct_id

        try:
            response = await self._client.post(f"{self.ingestion_host}/capture/", json=body)
        except httpx.HTTPError as e:
            logger.warning(f"PostHog capture error for {event!r}: {e}")
            return

        if response.is_error:
            logger.warning(
                f"PostHog capture failed for {event!r}: "
                f"{response.status_code} {response.text[:200]}"
            )

    async def count_events(self, event: str = COVER_LETTER_GENERATED) -> int:
        """
        Count all occurrences of an event, cached for ``cache_seconds``.

        Args:
            event: Event name.

        Returns:
            The event count, or 0 when unconfigured or the query fails.
        """
        if not self.project_id or not self.personal_api_key:
            return 0

        cache_key = f"{self.project_id}:{event}"
        now = time.monotonic()
        cached = self._cache.get(cache_key)
        if cached and now - cached[0] < self.cache_seconds:
            return cached[1]

        url = f"{self.api_host}/api/projects/{self.project_id}/query/"
        payload = {"query": {"kind": "HogQLQuery", "query": _count_query(event)}}
        headers = {"Authorization": f"Bearer {self.personal_api_key}"}

        try:
            response = await self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"PostHog query error for {event!r}: {e}")
            return 0

        if response.is_error:
            logger.warning(
                f"PostHog query failed for {event!r}: "
                f"{response.status_code} {response.text[:200]}"
            )
            return 0

        try:
            data = response.json()
        except ValueError:
            data = {}
        total = _parse_total(data)

        self._cache[cache_key] = (now, total)
        return total
