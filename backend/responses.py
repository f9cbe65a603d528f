"""Standardized response infrastructure for API endpoints.

Provides consistent response format with structured codes and messages.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from fastapi.responses import JSONResponse


class ResponseCode(str, Enum):
    """Response codes for API responses.

    Ranges: 0xxx=Success, 1xxx=Client Error, 2xxx=Server Error, 3xxx=External Service
    """

    # Success codes
    SUCCESS = "0000"
    ASSISTANT_CREATED = "0001"
    ASSISTANT_UPDATED = "0002"
    ASSISTANT_DELETED = "0003"
    KNOWLEDGE_EXTRACTED = "0004"
    CONVERSATION_CREATED = "0005"

    # Client errors
    VALIDATION_ERROR = "1000"
    UNSUPPORTED_FILE_TYPE = "1001"
    FILE_TOO_LARGE = "1002"
    ASSISTANT_NOT_FOUND = "1003"
    EMPTY_DOCUMENT = "1004"
    CORRUPTED_FILE = "1005"
    CONFIGURATION_ERROR = "1006"
    UNSUPPORTED_PROVIDER = "1007"
    CONVERSATION_NOT_FOUND = "1008"
    STALE_CONVERSATION = "1009"
    UNAUTHORIZED = "1010"
    NOT_FOUND = "1011"

    # Server errors
    INTERNAL_ERROR = "2000"
    PERSISTENCE_ERROR = "2001"

    # External service errors
    LLM_RATE_LIMIT = "3001"
    DISPATCH_FAILED = "3003"
    PROVIDER_UNAVAILABLE = "3004"


# Response messages mapped to codes
RESPONSE_MESSAGES: dict[ResponseCode, str] = {
    ResponseCode.SUCCESS: "Operation completed successfully",
    ResponseCode.ASSISTANT_CREATED: "Assistant saved successfully",
    ResponseCode.ASSISTANT_UPDATED: "Assistant updated successfully",
    ResponseCode.ASSISTANT_DELETED: "Assistant deleted successfully",
    ResponseCode.KNOWLEDGE_EXTRACTED: "Knowledge base files processed",
    ResponseCode.CONVERSATION_CREATED: "Conversation started",
    ResponseCode.VALIDATION_ERROR: "Request validation failed",
    ResponseCode.UNSUPPORTED_FILE_TYPE: "Unsupported file type. Supported: PDF, DOCX, TXT, MD, CSV, JSON",
    ResponseCode.FILE_TOO_LARGE: "File exceeds maximum allowed size",
    ResponseCode.ASSISTANT_NOT_FOUND: "Assistant not found",
    ResponseCode.EMPTY_DOCUMENT: "Document contains no extractable text",
    ResponseCode.CORRUPTED_FILE: "File appears corrupted",
    ResponseCode.CONFIGURATION_ERROR: "Assistant configuration is incomplete",
    ResponseCode.UNSUPPORTED_PROVIDER: "Unsupported language model provider",
    ResponseCode.CONVERSATION_NOT_FOUND: "Conversation not found",
    ResponseCode.STALE_CONVERSATION: "Conversation was reset before the reply arrived",
    ResponseCode.UNAUTHORIZED: "Authentication required",
    ResponseCode.NOT_FOUND: "Resource not found",
    ResponseCode.INTERNAL_ERROR: "An internal error occurred",
    ResponseCode.PERSISTENCE_ERROR: "Failed to reach the assistant store",
    ResponseCode.LLM_RATE_LIMIT: "Rate limit exceeded. Please wait and retry",
    ResponseCode.DISPATCH_FAILED: "The language model request failed",
    ResponseCode.PROVIDER_UNAVAILABLE: "The language model provider is unavailable",
}

# HTTP status codes for each response code
HTTP_STATUS_MAP: dict[ResponseCode, int] = {
    ResponseCode.SUCCESS: 200,
    ResponseCode.ASSISTANT_CREATED: 201,
    ResponseCode.ASSISTANT_UPDATED: 200,
    ResponseCode.ASSISTANT_DELETED: 200,
    ResponseCode.KNOWLEDGE_EXTRACTED: 200,
    ResponseCode.CONVERSATION_CREATED: 201,
    ResponseCode.VALIDATION_ERROR: 422,
    ResponseCode.UNSUPPORTED_FILE_TYPE: 400,
    ResponseCode.FILE_TOO_LARGE: 413,
    ResponseCode.ASSISTANT_NOT_FOUND: 404,
    ResponseCode.EMPTY_DOCUMENT: 400,
    ResponseCode.CORRUPTED_FILE: 400,
    ResponseCode.CONFIGURATION_ERROR: 400,
    ResponseCode.UNSUPPORTED_PROVIDER: 400,
    ResponseCode.CONVERSATION_NOT_FOUND: 404,
    ResponseCode.STALE_CONVERSATION: 409,
    ResponseCode.UNAUTHORIZED: 401,
    ResponseCode.NOT_FOUND: 404,
    ResponseCode.INTERNAL_ERROR: 500,
    ResponseCode.PERSISTENCE_ERROR: 503,
    ResponseCode.LLM_RATE_LIMIT: 429,
    ResponseCode.DISPATCH_FAILED: 502,
    ResponseCode.PROVIDER_UNAVAILABLE: 503,
}


def get_message(code: ResponseCode) -> str:
    """Get the message for a response code."""
    return RESPONSE_MESSAGES.get(code, "Unknown error")


def get_http_status(code: ResponseCode) -> int:
    """Get HTTP status code for a response code."""
    return HTTP_STATUS_MAP.get(code, 500)


def success_dict(
    code: ResponseCode,
    data: Any = None,
    custom_message: str | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build a standardized success response dictionary."""
    return {
        "code": code.value,
        "success": True,
        "message": custom_message or get_message(code),
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
        "data": data,
    }


def error_dict(
    code: ResponseCode,
    custom_message: str | None = None,
    error_details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build a standardized error response dictionary."""
    return {
        "code": code.value,
        "success": False,
        "message": custom_message or get_message(code),
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
        "error_details": error_details,
    }


# --- JSONResponse helpers ---


def success_response(
    code: ResponseCode,
    data: Any = None,
    request_id: str | None = None,
    custom_message: str | None = None,
) -> JSONResponse:
    """Create a JSONResponse with success format."""
    return JSONResponse(
        content=success_dict(code, data, custom_message, request_id=request_id),
        status_code=get_http_status(code),
    )


def error_response(
    code: ResponseCode,
    custom_message: str | None = None,
    request_id: str | None = None,
    error_details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a JSONResponse with error format."""
    return JSONResponse(
        content=error_dict(code, custom_message, error_details, request_id=request_id),
        status_code=get_http_status(code),
    )
