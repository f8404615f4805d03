# =============================================================================
# Job Description Extraction Pipeline
# =============================================================================
"""
Ordered fallback over the extraction strategies.

Structured data is authoritative when a page publishes it, readability
handles article-like pages, and heading heuristics cover everything else.
The first strategy that yields text wins.
"""

import logging
from typing import Callable, Optional

from jobdesk.services.extraction.headings import extract_by_headings
from jobdesk.services.extraction.readable import extract_readable
from jobdesk.services.extraction.result import ExtractionResult, ExtractionSource
from jobdesk.services.extraction.structured import extract_structured


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


Strategy = Callable[[str, Optional[str]], Optional[ExtractionResult]]

STRATEGIES: tuple[Strategy, ...] = (
    extract_structured,
    extract_readable,
    extract_by_headings,
)


def extract_jd(html: str, url: Optional[str] = None) -> ExtractionResult:
    """
    Extract job description text from a page.

    Strategies run lazily in order and the first non-empty result is
    returned. A strategy that raises is treated as having found nothing.

    Args:
        html: Page HTML.
        url: URL the page was fetched from, used as the base for relative links.

    Returns:
        The first non-empty extraction result, or an empty heuristic result
        when no strategy finds any text.
    """
    for strategy in STRATEGIES:
        try:
            result = strategy(html, url)
        except Exception as e:
            logger.warning(f"Extraction strategy {strategy.__name__} failed: {e}", exc_info=True)
            continue

        if result is not None and result.text:
            logger.info(
                f"Extracted {len(result.text)} chars via {result.source.value}"
                + (f" from {url}" if url else "")
            )
            return result

    return ExtractionResult(text="", source=ExtractionSource.HEURISTIC)
