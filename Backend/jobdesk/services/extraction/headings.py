# =============================================================================
# Heading Heuristics Extractor
# =============================================================================
"""
Last-resort extraction for pages without structured data or an article body.

Finds headings and bold labels that name typical job-posting sections and
pulls in the block around each one, followed by the full page text so that
nothing is lost when the section detection misfires.
"""

import logging
from typing import Optional

from jobdesk.services.extraction.dom import drop_non_content, html_to_text, parse_html
from jobdesk.services.extraction.result import ExtractionResult, ExtractionSource
from jobdesk.services.extraction.text import normalize


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
HEADING_TAGS = ["h1", "h2", "h3", "h4", "strong", "b"]

SECTION_KEYWORDS = (
    "responsibilities",
    "requirements",
    "qualifications",
    "what you'll do",
    "what you will do",
    "minimum",
    "preferred",
)


def extract_by_headings(html: str, base_url: Optional[str] = None) -> Optional[ExtractionResult]:
    """
    Extract job sections located by their headings, plus the page text.

    Args:
        html: Page HTML.
        base_url: Unused; accepted so all strategies share one signature.

    Returns:
        Heuristic extraction result, or None if the page has no text at all.
    """
    try:
        soup = parse_html(html)
        drop_non_content(soup)
        baseline = normalize(html_to_text(soup))

        sections = []
        for element in soup.find_all(HEADING_TAGS):
            label = element.get_text().strip().lower()
            if not any(keyword in label for keyword in SECTION_KEYWORDS):
                continue
            if element.parent is None:
                continue
            snippet = normalize(html_to_text(element.parent))
            if snippet:
                sections.append(snippet)
    except Exception as e:
        logger.debug(f"Heading extraction failed: {e}")
        return None

    logger.debug(f"Heading heuristics matched {len(sections)} section(s)")
    combined = normalize("\n\n".join(filter(None, ["\n\n".join(sections), baseline])))
    if not combined:
        return None
    return ExtractionResult(text=combined, source=ExtractionSource.HEURISTIC)
