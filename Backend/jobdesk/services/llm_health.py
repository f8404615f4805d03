# =============================================================================
# LLM Provider Health Check
# =============================================================================
"""
Checks that the configured Anthropic key can reach the provider.

Lists the available models, which needs a valid key but costs no tokens,
and reports whether the provider was reachable and how it judged the key.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Literal, Optional

import httpx


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
PROVIDER = "anthropic"
MODELS_URL = "https://api.anthropic.com/v1/models"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_TIMEOUT = 5.0  # seconds

AuthState = Literal["ok", "missing_key", "unauthorized", "forbidden", "unknown"]


@dataclass
class LLMHealth:
    """Result of a provider health check."""

    ok: bool
    provider: str
    model: str
    has_key: bool
    reachable: bool
    auth: AuthState
    models_count: Optional[int] = None
    status: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


async def check_llm_health(
    api_key: str,
    model: str,
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> LLMHealth:
    """
    Probe the provider's model-list endpoint with the given key.

    Args:
        api_key: Anthropic API key; an empty key short-circuits to ``missing_key``.
        model: Configured model name, echoed back in the result.
        http_client: Optional HTTP client to use instead of a temporary one.
        timeout: Request timeout in seconds.

    Returns:
        LLMHealth describing reachability and key status.
    """
    if not api_key:
        return LLMHealth(
            ok=False, provider=PROVIDER, model=model,
            has_key=False, reachable=False, auth="missing_key",
        )

    headers = {"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION}
    client = http_client or httpx.AsyncClient(timeout=timeout)
    try:
        response = await client.get(MODELS_URL, headers=headers, timeout=timeout)
    except httpx.HTTPError as e:
        logger.warning(f"LLM health check could not reach {PROVIDER}: {e}")
        return LLMHealth(
            ok=False, provider=PROVIDER, model=model,
            has_key=True, reachable=False, auth="unknown",
        )
    finally:
        if http_client is None:
            await client.aclose()

    code = response.status_code
    if code in (401, 403):
        auth: AuthState = "unauthorized" if code == 401 else "forbidden"
        logger.warning(f"LLM health check rejected the API key: {code}")
        return LLMHealth(
            ok=False, provider=PROVIDER, model=model,
            has_key=True, reachable=True, auth=auth, status=code,
        )
    if response.is_error:
        return LLMHealth(
            ok=False, provider=PROVIDER, model=model,
            has_key=True, reachable=True, auth="unknown", status=code,
        )

    models_count = None
    try:
        data = response.json()
        models = data.get("data") if isinstance(data, dict) else None
        models_count = len(models) if isinstance(models, list) else 0
    except ValueError:
        pass

    return LLMHealth(
        ok=True, provider=PROVIDER, model=model,
        has_key=True, reachable=True, auth="ok",
        models_count=models_count, status=code,
    )
