# =============================================================================
# Readability Extractor
# =============================================================================
"""
Main-content extraction for article-like job pages.

Uses readability-lxml to strip navigation, sidebars and other boilerplate.
readability-lxml always returns *something* (it falls back to the whole
body), so pages are first checked with a port of Mozilla's
``isProbablyReaderable`` test; pages without an article-like body are left
to the heading heuristics.
"""

import logging
import math
import re
from typing import Optional

from readability import Document

from jobdesk.services.extraction.dom import html_to_text, parse_html
from jobdesk.services.extraction.result import ExtractionResult, ExtractionSource
from jobdesk.services.extraction.text import normalize


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Readerable Heuristic Constants (Mozilla Readability defaults)
# -----------------------------------------------------------------------------
MIN_CONTENT_LENGTH = 140
MIN_SCORE = 20

UNLIKELY_CANDIDATES = re.compile(
    r"-ad-|ai2html|banner|breadcrumbs|combx|comment|community|cover-wrap|disqus|"
    r"extra|footer|gdpr|header|legends|menu|related|remark|replies|rss|shoutbox|"
    r"sidebar|skyscraper|social|sponsor|supplemental|ad-break|agegate|pagination|"
    r"pager|popup|yom-remote",
    re.IGNORECASE,
)
MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|shadow", re.IGNORECASE)


def extract_readable(html: str, base_url: Optional[str] = None) -> Optional[ExtractionResult]:
    """
    Extract the main article body of a page.

    Args:
        html: Page HTML.
        base_url: URL the page was fetched from, used to resolve relative links.

    Returns:
        Readability extraction result, or None if the page has no readable
        article or parsing fails.
    """
    try:
        if not is_probably_readerable(html):
            logger.debug("Page does not look readerable; skipping readability")
            return None

        document = Document(html, url=base_url)
        summary = document.summary(html_partial=True)
        text = normalize(html_to_text(parse_html(summary)))
    except Exception as e:
        logger.debug(f"Readability extraction failed: {e}")
        return None

    if not text:
        return None
    return ExtractionResult(text=text, source=ExtractionSource.READABILITY)


def is_probably_readerable(html: str) -> bool:
    """
    Decide whether a page has an article-like main body.

    Pages with explicit ``<article>``/``<main>`` landmarks qualify directly.
    Otherwise long paragraphs are scored the way Mozilla Readability does:
    each visible ``p``/``pre`` of at least 140 characters contributes
    ``sqrt(length - 140)`` and the page qualifies once the total passes 20.

    Args:
        html: Page HTML.

    Returns:
        True if readability extraction is worth attempting.
    """
    soup = parse_html(html)
    if soup.find(["article", "main"]) or soup.find(attrs={"role": "main"}):
        return True

    score = 0.0
    for node in soup.find_all(["p", "pre"]):
        match_string = " ".join(node.get("class", [])) + " " + (node.get("id") or "")
        if UNLIKELY_CANDIDATES.search(match_string) and not MAYBE_CANDIDATE.search(match_string):
            continue
        if node.find_parent("li") is not None:
            continue

        length = len(node.get_text().strip())
        if length < MIN_CONTENT_LENGTH:
            continue

        score += math.sqrt(length - MIN_CONTENT_LENGTH)
        if score > MIN_SCORE:
            return True

    return False
