# src/pulse/api/responses.py
"""
Standardized API Responses

Every failure leaves the API in the same shape:

    {"success": false, "error": "<message>"}

Handlers raise APIException with an ErrorCode; the exception handler in
main.py turns it into the JSON body with the mapped HTTP status.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse


# -------------------------
# Error Codes
# -------------------------

class ErrorCode(str, Enum):
    """
    Error codes for API responses.
    Format: {CATEGORY}_{SPECIFIC_ERROR}
    """
    # Validation errors (4xx)
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    NOT_FOUND = "NOT_FOUND"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"

    # Downstream / server errors (5xx)
    TRACKER_ERROR = "TRACKER_ERROR"
    CHAT_ERROR = "CHAT_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# -------------------------
# HTTP Status Mappings
# -------------------------

ERROR_CODE_TO_HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.FILE_TOO_LARGE: 413,
    ErrorCode.UNSUPPORTED_FORMAT: 400,
    ErrorCode.EXTRACTION_FAILED: 400,

    ErrorCode.TRACKER_ERROR: 502,
    ErrorCode.CHAT_ERROR: 502,
    ErrorCode.INTERNAL_ERROR: 500,
}


def get_http_status(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)


def error_response(message: str, code: Optional[ErrorCode] = None) -> Dict[str, Any]:
    """Uniform error body. The code is carried alongside for clients that want it."""
    body: Dict[str, Any] = {"success": False, "error": message}
    if code is not None:
        body["code"] = code.value
    return body


def error_json(code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(status_code=get_http_status(code), content=error_response(message, code))


# -------------------------
# FastAPI Exception Class
# -------------------------

class APIException(HTTPException):
    """
    API exception with structured error response.

    Usage:
        raise APIException(
            error_code=ErrorCode.MISSING_REQUIRED_FIELD,
            message="Project name is required",
        )
    """
    def __init__(self, error_code: ErrorCode, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(status_code=get_http_status(error_code), detail=message)

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse for exception handlers."""
        return error_json(self.error_code, self.message)
