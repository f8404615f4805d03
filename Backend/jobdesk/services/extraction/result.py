# =============================================================================
# Extraction Result Types
# =============================================================================
"""
Value types shared by the job description extraction strategies.
"""

from dataclasses import dataclass
from enum import Enum


class ExtractionSource(str, Enum):
    """Which strategy produced an extraction result."""

    STRUCTURED = "structured"
    READABILITY = "readability"
    HEURISTIC = "heuristic"
    NONE = "none"

    @property
    def wire_name(self) -> str:
        """Name used for this source in API responses."""
        return _WIRE_NAMES[self]


_WIRE_NAMES = {
    ExtractionSource.STRUCTURED: "jsonld",
    ExtractionSource.READABILITY: "readability",
    ExtractionSource.HEURISTIC: "heuristics",
    ExtractionSource.NONE: "none",
}


@dataclass(frozen=True)
class ExtractionResult:
    """
    Job description text recovered from a page.

    Attributes:
        text: Whitespace-normalized job description text.
        source: Strategy that produced the text.
    """

    text: str
    source: ExtractionSource

    def __post_init__(self) -> None:
        if self.text and self.source is ExtractionSource.NONE:
            raise ValueError("Non-empty extraction text requires a concrete source")
