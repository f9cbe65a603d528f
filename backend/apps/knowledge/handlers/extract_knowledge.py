"""POST /knowledge/extract - Turn uploaded files into knowledge items."""

import logging
import uuid

from fastapi import Depends, File, UploadFile
from fastapi.responses import JSONResponse

from config import get_settings
from dependencies import get_document_parser
from responses import ResponseCode, error_response, success_response
from services import (
    DocumentParseError,
    DocumentParser,
    EmptyDocumentError,
    ExtractionFailure,
    FileTooLargeError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

FAILURE_CODES: dict[type[Exception], ResponseCode] = {
    UnsupportedFileTypeError: ResponseCode.UNSUPPORTED_FILE_TYPE,
    FileTooLargeError: ResponseCode.FILE_TOO_LARGE,
    EmptyDocumentError: ResponseCode.EMPTY_DOCUMENT,
    DocumentParseError: ResponseCode.CORRUPTED_FILE,
}


def failure_dict(failure: ExtractionFailure) -> dict[str, str]:
    code = FAILURE_CODES.get(failure.error_type, ResponseCode.VALIDATION_ERROR)
    return {"name": failure.name, "reason": failure.reason, "code": code.value}


async def extract_knowledge(
    files: list[UploadFile] = File(...),
    document_parser: DocumentParser = Depends(get_document_parser),
) -> JSONResponse:
    """Extract text from PDF, Word and text files.

    Files are processed concurrently. Unreadable or empty files are
    reported under `failures` and never block the rest of the batch.
    Nothing is persisted here; the returned items are saved with the
    assistant.
    """
    request_id = str(uuid.uuid4())[:8]
    settings = get_settings()

    if len(files) > settings.max_files_per_upload:
        return error_response(
            ResponseCode.VALIDATION_ERROR,
            f"At most {settings.max_files_per_upload} files per upload",
            request_id,
        )

    uploads = []
    for file in files:
        uploads.append((file.filename or "", await file.read()))

    logger.info("[%s] Extracting %d file(s)", request_id, len(uploads))

    try:
        result = await document_parser.extract_many(uploads)
    except Exception as e:
        logger.exception("[%s] Unexpected error during extraction", request_id)
        return error_response(ResponseCode.INTERNAL_ERROR, str(e), request_id)

    failures = [failure_dict(f) for f in result.failures]

    if not result.items:
        return error_response(
            ResponseCode.EMPTY_DOCUMENT,
            "None of the uploaded files contained extractable text",
            request_id,
            error_details={"failures": failures},
        )

    return success_response(
        ResponseCode.KNOWLEDGE_EXTRACTED,
        {
            "items": [item.model_dump() for item in result.items],
            "failures": failures,
        },
        request_id,
    )
