"""Async client for the Muhimbi PDF Online OCR API."""

from muhimbi_ocr.core.exceptions import (
    BaseError,
    EmptyResultError,
    HttpStatusError,
    MuhimbiApiError,
    OcrCancelledError,
    OcrFailedError,
    ResponseParseError,
    SourceFileNotFoundError,
    TransportError,
)
from muhimbi_ocr.domain.models import CharactersOption, OcrOptions, OcrResult
from muhimbi_ocr.infrastructure.clients.muhimbi_http import MuhimbiHttpClient

__all__ = [
    "BaseError",
    "CharactersOption",
    "EmptyResultError",
    "HttpStatusError",
    "MuhimbiApiError",
    "MuhimbiHttpClient",
    "OcrCancelledError",
    "OcrFailedError",
    "OcrOptions",
    "OcrResult",
    "ResponseParseError",
    "SourceFileNotFoundError",
    "TransportError",
]
