# =============================================================================
# Document Text Extractor
# =============================================================================
"""
Raw text extraction from résumé files.

PDF files are read with pypdf and DOCX files with python-docx. Output is the
text exactly as the libraries produce it; cleanup happens in
``jobdesk.services.documents.service``.
"""

import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

import docx
from pypdf import PdfReader


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_PDF_NAME = re.compile(r"\.pdf$", re.IGNORECASE)
_DOCX_NAME = re.compile(r"\.docx$", re.IGNORECASE)


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------
class DocumentError(Exception):
    """Base exception for résumé document errors."""

    pass


class UnsupportedDocumentError(DocumentError):
    """File is neither a PDF nor a DOCX document."""

    pass


class DocumentTooLargeError(DocumentError):
    """File exceeds the upload size limit."""

    pass


# -----------------------------------------------------------------------------
# Data Structures
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class UploadedDocument:
    """
    A résumé file received from the client.

    Attributes:
        filename: Original file name.
        content_type: MIME type reported by the client.
        buffer: File contents.
    """

    filename: str
    content_type: str
    buffer: bytes


@dataclass
class ExtractedDocument:
    """
    Text extracted from a document.

    Attributes:
        text: Extracted text.
        warnings: User-facing warnings about the extraction.
        meta: Extra details such as character and page counts.
    """

    text: str
    warnings: list[str] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)


class DocumentTextExtractor(Protocol):
    """Anything that turns a document buffer into text."""

    def extract(self, buffer: bytes, filename: str, content_type: str) -> ExtractedDocument:
        ...


# -----------------------------------------------------------------------------
# Type Detection
# -----------------------------------------------------------------------------
def is_pdf(filename: str = "", content_type: str = "") -> bool:
    """Whether a file looks like a PDF by name or content type."""
    return bool(_PDF_NAME.search(filename or "")) or PDF_CONTENT_TYPE in (content_type or "").lower()


def is_docx(filename: str = "", content_type: str = "") -> bool:
    """Whether a file looks like a DOCX by name or content type."""
    return bool(_DOCX_NAME.search(filename or "")) or DOCX_CONTENT_TYPE in (content_type or "").lower()


# -----------------------------------------------------------------------------
# Local Extractor
# -----------------------------------------------------------------------------
class LocalDocumentTextExtractor:
    """
    Extracts text in-process with pypdf and python-docx.

    Files the libraries cannot read produce empty text rather than an error,
    so a damaged upload surfaces as "nothing extracted" to the user.
    """

    def extract(self, buffer: bytes, filename: str, content_type: str) -> ExtractedDocument:
        """
        Extract raw text from a PDF or DOCX buffer.

        Args:
            buffer: File contents.
            filename: Original file name.
            content_type: MIME type reported by the client.

        Returns:
            Extracted text with page count metadata for PDFs.

        Raises:
            UnsupportedDocumentError: If the file is neither PDF nor DOCX.
        """
        if is_pdf(filename, content_type):
            return self._extract_pdf(buffer)
        if is_docx(filename, content_type):
            return self._extract_docx(buffer)
        raise UnsupportedDocumentError("Unsupported file type")

    def _extract_pdf(self, buffer: bytes) -> ExtractedDocument:
        try:
            reader = PdfReader(io.BytesIO(buffer))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as e:
            logger.warning(f"PDF extraction failed: {e}")
            return ExtractedDocument(text="", meta={"pages": None})

        return ExtractedDocument(text="\n".join(pages), meta={"pages": len(pages)})

    def _extract_docx(self, buffer: bytes) -> ExtractedDocument:
        try:
            document = docx.Document(io.BytesIO(buffer))
            lines = [paragraph.text for paragraph in document.paragraphs]
            for table in document.tables:
                for row in table.rows:
                    lines.append("\t".join(cell.text for cell in row.cells))
        except Exception as e:
            logger.warning(f"DOCX extraction failed: {e}")
            return ExtractedDocument(text="")

        return ExtractedDocument(text="\n".join(lines))
