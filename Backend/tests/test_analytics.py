# =============================================================================
# Usage Event Counter Tests
# =============================================================================
"""
Unit tests for PostHog event capture and cached event counts.
"""

import json

import httpx
import pytest

from jobdesk.config import Settings
from jobdesk.services.analytics import EventCounter


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def captured() -> list[httpx.Request]:
    """Requests seen by the mock PostHog."""
    return []


def make_counter(captured: list, handler, **kwargs) -> EventCounter:
    def recording(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
    options = {
        "project_key": "phc_test",
        "project_id": "42",
        "personal_api_key": "phx_dev",
        "ingestion_host": "https://us.i.posthog.com/",
        "api_host": "https://app.posthog.com",
    }
    options.update(kwargs)
    return EventCounter(http_client=client, **options)


# -----------------------------------------------------------------------------
# Tests
# -----------------------------------------------------------------------------
class TestRecord:
    """Tests for EventCounter.record."""

    @pytest.mark.asyncio
    async def test_posts_capture(self, captured) -> None:
        """Test that events are posted with the api key and distinct id."""
        counter = make_counter(captured, lambda r: httpx.Response(200, json={"status": 1}))

        await counter.record("cover_letter_generated", {"channel": "server"}, "abc")

        request = captured[0]
        body = json.loads(request.content)
        assert str(request.url) == "https://us.i.posthog.com/capture/"
        assert body["api_key"] == "phc_test"
        assert body["event"] == "cover_letter_generated"
        assert body["distinct_id"] == "abc"
        assert body["properties"] == {"channel": "server", "distinct_id": "abc"}
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_random_server_identity(self, captured) -> None:
        """Test that anonymous events get a server-generated id."""
        counter = make_counter(captured, lambda r: httpx.Response(200))

        await counter.record("cover_letter_generated")

        body = json.loads(captured[0].content)
        assert body["properties"]["distinct_id"].startswith("server-")
        assert "distinct_id" not in body

    @pytest.mark.asyncio
    async def test_unconfigured_is_noop(self, captured) -> None:
        """Test that nothing is sent without an ingestion key."""
        counter = make_counter(captured, lambda r: httpx.Response(200), project_key="")

        await counter.record("cover_letter_generated")

        assert captured == []

    @pytest.mark.asyncio
    async def test_failures_swallowed(self, captured) -> None:
        """Test that capture errors never propagate."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        counter = make_counter(captured, handler)
        await counter.record("cover_letter_generated")

        counter = make_counter(captured, lambda r: httpx.Response(500, text="oops"))
        await counter.record("cover_letter_generated")


class TestCountEvents:
    """Tests for EventCounter.count_events."""

    @pytest.mark.asyncio
    async def test_queries_hogql(self, captured) -> None:
        """Test that counts are read from a HogQL query with the personal key."""
        counter = make_counter(captured, lambda r: httpx.Response(200, json={"results": [[17]]}))

        total = await counter.count_events("cover_letter_generated")

        request = captured[0]
        body = json.loads(request.content)
        assert total == 17
        assert str(request.url) == "https://app.posthog.com/api/projects/42/query/"
        assert request.headers["authorization"] == "Bearer phx_dev"
        assert body["query"]["kind"] == "HogQLQuery"
        assert "event = 'cover_letter_generated'" in body["query"]["query"]

    @pytest.mark.asyncio
    async def test_object_rows(self, captured) -> None:
        """Test that rows returned as objects are understood."""
        counter = make_counter(captured, lambda r: httpx.Response(200, json={"results": [{"total": 5}]}))

        assert await counter.count_events() == 5

    @pytest.mark.asyncio
    async def test_cached(self, captured) -> None:
        """Test that repeated counts within the TTL reuse the cached value."""
        counter = make_counter(captured, lambda r: httpx.Response(200, json={"results": [[3]]}))

        assert await counter.count_events() == 3
        assert await counter.count_events() == 3
        assert len(captured) == 1

        counter.reset_cache()
        await counter.count_events()
        assert len(captured) == 2

    @pytest.mark.asyncio
    async def test_zero_ttl_disables_cache(self, captured) -> None:
        """Test that a zero TTL queries every time."""
        counter = make_counter(
            captured, lambda r: httpx.Response(200, json={"results": [[1]]}), cache_seconds=0
        )

        await counter.count_events()
        await counter.count_events()

        assert len(captured) == 2

    @pytest.mark.asyncio
    async def test_failed_query_gives_zero(self, captured) -> None:
        """Test that query failures report zero and are not cached."""
        counter = make_counter(captured, lambda r: httpx.Response(403, text="forbidden"))

        assert await counter.count_events() == 0
        assert await counter.count_events() == 0
        assert len(captured) == 2

    @pytest.mark.asyncio
    async def test_unconfigured_gives_zero(self, captured) -> None:
        """Test that no query is made without project credentials."""
        counter = make_counter(captured, lambda r: httpx.Response(200), personal_api_key="")

        assert await counter.count_events() == 0
        assert captured == []


class TestFromSettings:
    """Tests for EventCounter.from_settings."""

    def test_environment_keys(self) -> None:
        """Test that production settings pick the production keys."""
        settings = Settings(
            app_env="production",
            posthog_dev_project_key="phc_dev",
            posthog_prod_project_key="phc_prod",
            posthog_prod_project_id="7",
            posthog_prod_personal_api_key="phx_prod",
            posthog_api_host="https://eu.posthog.com/",
        )

        counter = EventCounter.from_settings(settings, http_client=httpx.AsyncClient())

        assert counter.project_key == "phc_prod"
        assert counter.project_id == "7"
        assert counter.personal_api_key == "phx_prod"
        assert counter.api_host == "https://eu.posthog.com"
