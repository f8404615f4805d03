# =============================================================================
# Text Normalization
# =============================================================================
"""
Whitespace normalization and boilerplate removal for extracted text.

These helpers are shared by the job description strategies and by résumé
post-processing. They are total functions: any input produces a string.
"""

import re
from collections import Counter
from typing import Optional

from jobdesk.services.extraction.dom import drop_non_content, html_to_text, parse_html


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
MIN_LINES_FOR_BOILERPLATE = 10
MIN_REPEATS_FOR_BOILERPLATE = 3

_TABS_AND_CRS = re.compile(r"[\t\r]+")
_SPACE_RUNS = re.compile(r" +")
_BLANK_LINE_RUNS = re.compile(r"\s*\n\s*\n\s*")
_TAG_LIKE = re.compile(r"</?[a-zA-Z][^>]*>")


def normalize(raw: Optional[str]) -> str:
    """
    Normalize whitespace in extracted text.

    Non-breaking spaces become spaces, tabs and carriage returns collapse
    to a single space, runs of spaces collapse to one, and any blank-line
    sequence collapses to exactly one blank line.

    Args:
        raw: Text to normalize. Falsy values produce an empty string.

    Returns:
        The normalized, trimmed text.
    """
    if not raw:
        return ""

    text = str(raw).replace("\u00a0", " ")
    text = _TABS_AND_CRS.sub(" ", text)
    text = _SPACE_RUNS.sub(" ", text)
    text = _BLANK_LINE_RUNS.sub("\n\n", text)
    return text.strip()


def strip_repeated_boilerplate(text: str) -> str:
    """
    Remove page headers and footers repeated throughout a document.

    Only documents with at least ten lines are considered. If the first
    line occurs three or more times every copy of it is dropped, and the
    same applies to the last line. Both checks count lines in the unmodified input.

    Args:
        text: Multi-line document text.

    Returns:
        The text without repeated header/footer lines, or the input
        unchanged when it is too short to judge.
    """
    lines = str(text or "").split("\n")
    if len(lines) < MIN_LINES_FOR_BOILERPLATE:
        return text

    counts = Counter(lines)
    repeated = set()
    header, footer = lines[0], lines[-1]
    if header and counts[header] >= MIN_REPEATS_FOR_BOILERPLATE:
        repeated.add(header)
    if footer and counts[footer] >= MIN_REPEATS_FOR_BOILERPLATE:
        repeated.add(footer)

    if not repeated:
        return text
    return "\n".join(line for line in lines if line not in repeated)


def strip_html(fragment: Optional[str]) -> str:
    """
    Convert an HTML fragment to normalized plain text.

    Job boards frequently entity-escape the markup they embed in JSON-LD,
    so a fragment with no real tags whose text still looks like markup after
    one pass is parsed again. Escaped tags next to real markup are literal
    text and are kept.

    Args:
        fragment: HTML (or plain text) to convert.

    Returns:
        Normalized plain text.
    """
    if not fragment:
        return ""

    fragment = str(fragment)
    text = _fragment_text(fragment)
    if not _TAG_LIKE.search(fragment) and _TAG_LIKE.search(text):
        text = _fragment_text(text)
    return normalize(text)


def _fragment_text(fragment: str) -> str:
    soup = parse_html(fragment)
    drop_non_content(soup)
    return html_to_text(soup)
