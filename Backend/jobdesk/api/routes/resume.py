# =============================================================================
# Résumé Upload Routes
# =============================================================================
"""
API route for extracting text from an uploaded résumé.

All endpoints are prefixed with /api when registered.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from jobdesk.api.dependencies import get_resume_service
from jobdesk.models import ErrorResponse, ResumeExtractResponse, ResumeMeta
from jobdesk.services.documents import (
    DocumentTooLargeError,
    ResumeTextService,
    UnsupportedDocumentError,
    UploadedDocument,
)


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Router Configuration
# -----------------------------------------------------------------------------
router = APIRouter(tags=["Resume"])


@router.post(
    "/extract-resume",
    response_model=ResumeExtractResponse,
    responses={
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
    },
    summary="Extract text from a PDF or DOCX résumé",
)
async def extract_resume(
    file: Annotated[UploadFile, File(description="PDF or DOCX résumé")],
    service: Annotated[ResumeTextService, Depends(get_resume_service)],
) -> Any:
    """
    Extract clean text from an uploaded résumé.

    A file the parser cannot read yields empty text rather than an error;
    scanned PDFs come back empty with an OCR warning.
    """
    filename = file.filename or ""
    content_type = file.content_type or ""

    try:
        # Reject by type and declared size before reading the whole upload
        service.validate_upload(filename, content_type, file.size or 0)
        data = await file.read()
        document = service.extract(UploadedDocument(filename, content_type, data))
    except UnsupportedDocumentError as e:
        logger.info(f"Rejected upload {filename!r} ({content_type}): unsupported type")
        return JSONResponse(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            content=ErrorResponse(error=str(e), code="unsupported_file_type").model_dump(),
        )
    except DocumentTooLargeError as e:
        logger.info(f"Rejected upload {filename!r}: too large")
        return JSONResponse(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            content=ErrorResponse(error=str(e), code="file_too_large").model_dump(),
        )
    finally:
        await file.close()

    return ResumeExtractResponse(
        text=document.text,
        warnings=document.warnings,
        meta=ResumeMeta(**document.meta),
    )
