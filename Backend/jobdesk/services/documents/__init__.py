# =============================================================================
# Résumé Document Package
# =============================================================================
"""
Résumé upload validation and text extraction.

Usage:
    from jobdesk.services.documents import ResumeTextService, UploadedDocument

    service = ResumeTextService()
    document = service.extract(UploadedDocument("cv.pdf", "application/pdf", data))
"""

from jobdesk.services.documents.extractor import (
    DocumentError,
    DocumentTextExtractor,
    DocumentTooLargeError,
    ExtractedDocument,
    LocalDocumentTextExtractor,
    UnsupportedDocumentError,
    UploadedDocument,
    is_docx,
    is_pdf,
)
from jobdesk.services.documents.service import OCR_WARNING, ResumeTextService

__all__ = [
    "DocumentError",
    "DocumentTextExtractor",
    "DocumentTooLargeError",
    "ExtractedDocument",
    "LocalDocumentTextExtractor",
    "OCR_WARNING",
    "ResumeTextService",
    "UnsupportedDocumentError",
    "UploadedDocument",
    "is_docx",
    "is_pdf",
]
