"""Error envelope shared by every non-2xx API response."""

from typing import Any

from pydantic import BaseModel

# HTTP status -> machine-readable error code
ERROR_CODES = {
    400: "bad_request",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
    500: "internal_error",
    503: "service_unavailable",
}


class ErrorResponse(BaseModel):
    """``{"detail": ..., "error_code": ...}``; detail is a message or a list of field errors."""

    detail: Any
    error_code: str = "internal_error"

    @classmethod
    def for_status(cls, status_code: int, detail: Any) -> "ErrorResponse":
        return cls(detail=detail, error_code=ERROR_CODES.get(status_code, "internal_error"))
