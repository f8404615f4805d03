# =============================================================================
# Job Description Extraction Package
# =============================================================================
"""
Multi-strategy text extraction for job posting pages.

Strategies, in the order the pipeline tries them:
- JSON-LD ``JobPosting`` structured data
- Readability main-content extraction
- Heading heuristics over the whole page

Usage:
    from jobdesk.services.extraction import extract_jd

    result = extract_jd(html, "https://jobs.example.com/posting/42")
    print(result.source.wire_name, result.text)
"""

from jobdesk.services.extraction.headings import extract_by_headings
from jobdesk.services.extraction.pipeline import extract_jd
from jobdesk.services.extraction.readable import extract_readable
from jobdesk.services.extraction.result import ExtractionResult, ExtractionSource
from jobdesk.services.extraction.structured import extract_structured
from jobdesk.services.extraction.text import (
    normalize,
    strip_html,
    strip_repeated_boilerplate,
)

__all__ = [
    "ExtractionResult",
    "ExtractionSource",
    "extract_by_headings",
    "extract_jd",
    "extract_readable",
    "extract_structured",
    "normalize",
    "strip_html",
    "strip_repeated_boilerplate",
]
