"""Exception hierarchy for the Muhimbi OCR client.

All errors inherit from BaseError and carry a stable error code, a category
and a details mapping so callers can log or serialize them uniformly.
Vendor API failures share the MuhimbiApiError base; cancellation is kept
separate so callers can tell "gave up" apart from "server said no".
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

MAX_CHAIN_DEPTH = 10


class ErrorCategory(str, Enum):
    """Error categories for classification."""

    CLIENT_ERROR = "client_error"
    EXTERNAL_SERVICE = "external_service"
    CANCELLED = "cancelled"


def exception_chain(exc: BaseException | None, max_depth: int = MAX_CHAIN_DEPTH) -> list[tuple[str, str]]:
    """Collect (type name, message) pairs for an exception and its causes.

    Follows ``__cause__`` first and falls back to ``__context__``. Stops after
    ``max_depth`` levels so that cyclic or very deep chains stay bounded.
    """
    chain: list[tuple[str, str]] = []
    current = exc
    while current is not None and len(chain) < max_depth:
        chain.append((type(current).__name__, str(current)))
        current = current.__cause__ or current.__context__
    return chain


def format_exception_chain(exc: BaseException | None, max_depth: int = MAX_CHAIN_DEPTH) -> str:
    """Render an exception chain as ``[Type] message -> [Type] message``."""
    return " -> ".join(f"[{name}] {message}" for name, message in exception_chain(exc, max_depth))


class BaseError(Exception):
    """Base exception for all client errors.

    Attributes:
        message: Human-readable error message
        error_code: Application-specific error code
        category: Error category for classification
        details: Additional context (dict)
        retryable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to a flat, JSON-friendly mapping."""
        return {
            "code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
            "retryable": self.retryable,
        }


class SourceFileNotFoundError(BaseError, FileNotFoundError):
    """The local input file does not exist.

    Raised before any network call is made.
    """

    def __init__(self, path: str):
        super().__init__(
            message=f"Source file not found: {path}",
            error_code="SOURCE_FILE_NOT_FOUND",
            category=ErrorCategory.CLIENT_ERROR,
            details={"path": path},
        )
        self.path = path


class MuhimbiApiError(BaseError):
    """Base for failures talking to the Muhimbi API."""

    def __init__(self, message: str, error_code: str = "MUHIMBI_API_ERROR", **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.EXTERNAL_SERVICE,
            details=kwargs.pop("details", None),
            retryable=kwargs.pop("retryable", False),
        )


class TransportError(MuhimbiApiError):
    """Network level failure (timeout, connection refused, TLS, ...).

    Args:
        message: Summary of the failure
        cause: The underlying exception; its full chain is kept on ``chain``
        timeout: Whether the failure was a timeout
    """

    def __init__(self, message: str, cause: BaseException | None = None, timeout: bool = False):
        self.chain = exception_chain(cause)
        super().__init__(
            message=message,
            error_code="TRANSPORT_TIMEOUT" if timeout else "TRANSPORT_ERROR",
            details={"chain": [f"[{name}] {msg}" for name, msg in self.chain]},
        )
        self.timeout = timeout


class HttpStatusError(MuhimbiApiError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: str):
        super().__init__(
            message=f"API returned {status_code} {reason}: {body}",
            error_code="HTTP_STATUS_ERROR",
            details={"status_code": status_code, "reason": reason, "body": body},
        )
        self.status_code = status_code
        self.reason = reason
        self.body = body


class ResponseParseError(MuhimbiApiError):
    """The API response could not be interpreted."""

    def __init__(self, message: str = "Failed to parse API response", body: str | None = None):
        super().__init__(
            message=message,
            error_code="RESPONSE_PARSE_ERROR",
            details={"body": body} if body is not None else None,
        )
        self.body = body


class OcrFailedError(MuhimbiApiError):
    """The vendor reported a result code that is neither success nor in progress.

    ``result_code`` and ``result_details`` are kept verbatim from the response.
    """

    def __init__(
        self,
        result_code: str | None,
        result_details: str | None,
        message: str | None = None,
        error_code: str = "OCR_FAILED",
    ):
        super().__init__(
            message=message or f"OCR failed: {result_code} - {result_details}",
            error_code=error_code,
            details={"result_code": result_code, "result_details": result_details},
        )
        self.result_code = result_code
        self.result_details = result_details


class EmptyResultError(OcrFailedError):
    """Success was reported but the processed file content is missing."""

    def __init__(self, result_code: str | None, result_details: str | None):
        super().__init__(
            result_code,
            result_details,
            message="API returned empty file content",
            error_code="OCR_EMPTY_RESULT",
        )


class OcrCancelledError(BaseError):
    """The caller cancelled the operation while waiting for the OCR result."""

    def __init__(self, message: str = "Operation was cancelled while waiting for OCR result", task_id: str | None = None):
        super().__init__(
            message=message,
            error_code="OCR_CANCELLED",
            category=ErrorCategory.CANCELLED,
            details={"task_id": task_id} if task_id else None,
        )
        self.task_id = task_id
