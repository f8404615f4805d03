# =============================================================================
# Text Completion Service
# =============================================================================
"""
Opaque text completion backed by the Anthropic Messages API.

Callers supply instructions (the system prompt) and an input string and get
plain text back. Prompt content lives with the callers.
"""

import logging
from typing import Optional, Protocol

import anthropic


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
DEFAULT_MAX_TOKENS = 700
DEFAULT_TEMPERATURE = 0.3
DEFAULT_TIMEOUT = 20.0  # seconds


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------
class CompletionError(Exception):
    """The completion provider returned an error."""

    pass


class CompletionTimeoutError(CompletionError):
    """The completion provider did not answer in time."""

    pass


class TextCompletionService(Protocol):
    """Anything that completes text from instructions and an input."""

    async def complete(self, instructions: str, input: str) -> str:
        ...


# -----------------------------------------------------------------------------
# Anthropic Implementation
# -----------------------------------------------------------------------------
class AnthropicCompletionService:
    """
    Text completion using Claude.

    Attributes:
        client: Async Anthropic client.
        model: Claude model name.
        max_tokens: Maximum output tokens per completion.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ) -> None:
        """
        Initialize the completion service.

        Args:
            api_key: Anthropic API key.
            model: Claude model to use.
            max_tokens: Maximum output tokens per completion.
            timeout: Request timeout in seconds.
            client: Optional pre-configured Anthropic client.
        """
        self.client = client or anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=0,
        )
        self.model = model
        self.max_tokens = max_tokens

    async def close(self) -> None:
        """Close the underlying Anthropic client."""
        await self.client.close()

    async def complete(self, instructions: str, input: str) -> str:
        """
        Complete text with Claude.

        Args:
            instructions: System prompt.
            input: User message content.

        Returns:
            Concatenated text blocks of the response, stripped.

        Raises:
            CompletionTimeoutError: If the request timed out.
            CompletionError: For any other API failure.
        """
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=DEFAULT_TEMPERATURE,
                system=instructions,
                messages=[{"role": "user", "content": input}],
            )
        except anthropic.APITimeoutError as e:
            logger.error(f"Anthropic request timed out: {e}")
            raise CompletionTimeoutError("Provider timeout") from e
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise CompletionError(f"Failed to get response from Claude: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.info(
            f"Completion finished: {response.usage.input_tokens} input / "
            f"{response.usage.output_tokens} output tokens"
        )
        return text.strip()
