# =============================================================================
# Résumé Text Service
# =============================================================================
"""
Validates résumé uploads and cleans up the text extracted from them.

Parsing itself is delegated to a ``DocumentTextExtractor``; this service
owns the type/size checks and the post-processing: repeated page headers
and footers are removed from PDFs, whitespace is normalized, and a warning
is added when a PDF has no text layer.
"""

import logging
from typing import Optional

from jobdesk.services.documents.extractor import (
    DocumentTextExtractor,
    DocumentTooLargeError,
    ExtractedDocument,
    LocalDocumentTextExtractor,
    UnsupportedDocumentError,
    UploadedDocument,
    is_docx,
    is_pdf,
)
from jobdesk.services.extraction.text import normalize, strip_repeated_boilerplate


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024

OCR_WARNING = (
    "We couldn't read this file because it's a scanned PDF. OCR isn't supported yet. "
    "Please paste your resume text instead."
)


class ResumeTextService:
    """
    Turns uploaded résumé files into clean text.

    Attributes:
        extractor: Collaborator that performs the raw text extraction.
        max_upload_bytes: Largest accepted upload.
    """

    def __init__(
        self,
        extractor: Optional[DocumentTextExtractor] = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.extractor = extractor or LocalDocumentTextExtractor()
        self.max_upload_bytes = max_upload_bytes

    def validate_upload(self, filename: str, content_type: str, size_bytes: int) -> None:
        """
        Check an upload's type and size before reading it.

        Args:
            filename: Original file name.
            content_type: MIME type reported by the client.
            size_bytes: Size of the upload.

        Raises:
            UnsupportedDocumentError: If the file is neither PDF nor DOCX.
            DocumentTooLargeError: If the file exceeds the size limit.
        """
        if not (is_pdf(filename, content_type) or is_docx(filename, content_type)):
            raise UnsupportedDocumentError("Unsupported file type. Only PDF and DOCX are allowed.")
        if size_bytes > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise DocumentTooLargeError(f"File too large (max {limit_mb} MB).")

    def extract(self, upload: UploadedDocument) -> ExtractedDocument:
        """
        Validate an upload and return its cleaned text.

        Args:
            upload: The uploaded file.

        Returns:
            Cleaned text, warnings, and metadata including the character count.

        Raises:
            UnsupportedDocumentError: If the file type is not supported.
            DocumentTooLargeError: If the file exceeds the size limit.
        """
        self.validate_upload(upload.filename, upload.content_type, len(upload.buffer))

        raw = self.extractor.extract(upload.buffer, upload.filename, upload.content_type)
        pdf = is_pdf(upload.filename, upload.content_type)

        text = strip_repeated_boilerplate(raw.text) if pdf else raw.text
        text = normalize(text)

        warnings = list(raw.warnings)
        if pdf and not text:
            warnings.append(OCR_WARNING)

        meta = dict(raw.meta)
        meta["chars"] = len(text)
        logger.info(
            f"Extracted {len(text)} chars from {'PDF' if pdf else 'DOCX'} "
            f"upload {upload.filename!r}"
        )
        return ExtractedDocument(text=text, warnings=warnings, meta=meta)
