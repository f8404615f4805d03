# =============================================================================
# JSON-LD JobPosting Extractor
# =============================================================================
"""
Extracts job description text from schema.org ``JobPosting`` JSON-LD blocks.

Structured data is the most reliable signal a page can offer, so this is
the first strategy the pipeline tries.
"""

import json
import logging
from typing import Any, Optional

from jobdesk.services.extraction.dom import parse_html
from jobdesk.services.extraction.result import ExtractionResult, ExtractionSource
from jobdesk.services.extraction.text import normalize, strip_html


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
JOB_POSTING_TYPE = "JobPosting"
JSONLD_MIME = "application/ld+json"

# Appended after title and description, in this order
SECTION_FIELDS = (
    "responsibilities",
    "qualifications",
    "skills",
    "experienceRequirements",
)


def extract_structured(
    html: str,
    base_url: Optional[str] = None,
) -> Optional[ExtractionResult]:
    """
    Extract job text from the first qualifying JSON-LD JobPosting node.

    Blocks that fail to parse are skipped. The first node whose text is
    non-empty wins; there is no ranking between postings.

    Args:
        html: Page HTML.
        base_url: Unused; accepted so all strategies share one signature.

    Returns:
        Structured extraction result, or None if no JobPosting yields text.
    """
    soup = parse_html(html)
    scripts = soup.find_all("script", attrs={"type": _is_jsonld_type})

    for script in scripts:
        raw = script.string or ""
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.debug(f"Skipping unparseable JSON-LD block: {type(e).__name__}")
            continue

        for node in _flatten(data):
            if not _is_job_posting(node):
                continue
            text = _posting_text(node)
            if text:
                return ExtractionResult(text=text, source=ExtractionSource.STRUCTURED)

    return None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _is_jsonld_type(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() == JSONLD_MIME


def _flatten(data: Any) -> list[dict]:
    """Normalize a JSON-LD value into a flat list of candidate nodes."""
    if isinstance(data, list):
        nodes = data
    elif isinstance(data, dict) and isinstance(data.get("@graph"), list):
        nodes = data["@graph"]
    else:
        nodes = [data]
    return [node for node in nodes if isinstance(node, dict)]


def _is_job_posting(node: dict) -> bool:
    types = node.get("@type")
    if isinstance(types, str):
        types = [types]
    if not isinstance(types, list):
        return False
    return JOB_POSTING_TYPE in types


def _posting_text(node: dict) -> str:
    parts = []
    if node.get("title"):
        parts.append(str(node["title"]))
    if node.get("description"):
        parts.append(_field_text(node["description"]))
    for field_name in SECTION_FIELDS:
        if node.get(field_name):
            parts.append(_field_text(node[field_name]))
    return normalize("\n\n".join(part for part in parts if part))


def _field_text(value: Any) -> str:
    """
    Render a JobPosting property as plain text.

    Properties are usually HTML strings, but some sites publish lists of
    strings or DefinedTerm-style objects.
    """
    if isinstance(value, list):
        return "\n".join(filter(None, (_field_text(item) for item in value)))
    if isinstance(value, dict):
        return _field_text(value.get("name") or value.get("description") or "")
    return strip_html(str(value))
