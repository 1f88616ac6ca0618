"""Error taxonomy for the insight pipeline and its HTTP envelope."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    MODEL_OUTPUT_INVALID = "MODEL_OUTPUT_INVALID"
    ARTIFACT_VALIDATION_FAILED = "ARTIFACT_VALIDATION_FAILED"
    MODEL_BACKEND_UNAVAILABLE = "MODEL_BACKEND_UNAVAILABLE"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class InsightError(Exception):
    """Base class for failures surfaced at the API boundary."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.PERSISTENCE_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(InsightError):
    """A required scalar input was missing or malformed."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class AccountNotFoundError(InvalidRequestError):
    status_code = 404
    error_code = ErrorCode.NOT_FOUND


class ModelOutputError(InsightError):
    """The model reply could not be parsed as JSON."""

    status_code = 502
    error_code = ErrorCode.MODEL_OUTPUT_INVALID

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text[:500]


class ValidationError(InsightError):
    """Parsed model output did not satisfy the artifact contract."""

    status_code = 502
    error_code = ErrorCode.ARTIFACT_VALIDATION_FAILED

    def __init__(self, message: str, violations: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.violations = list(violations or [])


class BackendError(InsightError):
    """The generative-model backend was unreachable or rejected the call."""

    status_code = 503
    error_code = ErrorCode.MODEL_BACKEND_UNAVAILABLE


class PersistenceError(InsightError):
    status_code = 500
    error_code = ErrorCode.PERSISTENCE_ERROR


def build_error_payload(error: InsightError, request_id: str | None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "success": False,
        "error": error.message,
        "error_code": error.error_code.value,
        "request_id": request_id or "",
    }
    if isinstance(error, ValidationError) and error.violations:
        payload["violations"] = error.violations
    return payload
