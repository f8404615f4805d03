# =============================================================================
# LLM Health Check Tests
# =============================================================================
"""
Unit tests for the provider health probe.
"""

import httpx
import pytest

from jobdesk.services.llm_health import MODELS_URL, check_llm_health


def client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# -----------------------------------------------------------------------------
# Tests
# -----------------------------------------------------------------------------
class TestCheckLLMHealth:
    """Tests for check_llm_health."""

    @pytest.mark.asyncio
    async def test_missing_key(self) -> None:
        """Test that no request is made without a key."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        health = await check_llm_health("", "claude-test", http_client=client_for(handler))

        assert health.auth == "missing_key"
        assert health.has_key is False
        assert health.reachable is False
        assert health.ok is False

    @pytest.mark.asyncio
    async def test_ok(self) -> None:
        """Test that a model list response means the key works."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": [{"id": "a"}, {"id": "b"}]})

        health = await check_llm_health("sk-test", "claude-test", http_client=client_for(handler))

        assert health.ok is True
        assert health.auth == "ok"
        assert health.models_count == 2
        assert health.status == 200
        assert health.provider == "anthropic"
        assert str(seen[0].url) == MODELS_URL
        assert seen[0].headers["x-api-key"] == "sk-test"
        assert "anthropic-version" in seen[0].headers

    @pytest.mark.parametrize(
        ("status_code", "auth"),
        [(401, "unauthorized"), (403, "forbidden"), (500, "unknown"), (429, "unknown")],
    )
    @pytest.mark.asyncio
    async def test_error_statuses(self, status_code: int, auth: str) -> None:
        """Test that provider error statuses map to auth states."""
        health = await check_llm_health(
            "sk-test",
            "claude-test",
            http_client=client_for(lambda r: httpx.Response(status_code)),
        )

        assert health.ok is False
        assert health.reachable is True
        assert health.auth == auth
        assert health.status == status_code

    @pytest.mark.asyncio
    async def test_unreachable(self) -> None:
        """Test that timeouts report the provider as unreachable."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        health = await check_llm_health("sk-test", "claude-test", http_client=client_for(handler))

        assert health.reachable is False
        assert health.auth == "unknown"
        assert health.to_dict()["has_key"] is True
