"""Request/response models for the Muhimbi ``ocr_pdf`` operation.

The wire format uses lower_snake_case keys, which match the field names
below, so no aliasing is needed. Optional request fields left as ``None``
are omitted from the payload.
"""

from __future__ import annotations

import base64
import binascii
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from muhimbi_ocr.core.exceptions import ResponseParseError

RESULT_SUCCESS = "Success"
RESULT_ACCEPTED = "Accepted"
IN_PROGRESS_CODES = frozenset({"Accepted", "Pending", "Processing"})
TASK_ID_PREFIX = "task_id="


class CharactersOption(str, Enum):
    """Whether ``characters`` is ignored, a whitelist or a blacklist."""

    NONE = "None"
    WHITELIST = "Whitelist"
    BLACKLIST = "Blacklist"


class OcrOptions(BaseModel):
    """Tuning knobs for the OCR engine that rarely change between calls."""

    model_config = ConfigDict(frozen=True)

    characters_option: CharactersOption = CharactersOption.NONE
    characters: str | None = None
    # Only paginate when documents have images spanning multiple pages.
    paginate: bool = False
    regions: str | None = None
    fail_on_error: bool = True


class OcrRequest(BaseModel):
    """Body of ``POST v1/operations/ocr_pdf``."""

    model_config = ConfigDict(frozen=True)

    use_async_pattern: bool
    source_file_name: str
    source_file_content: str
    language: str
    performance: str
    characters_option: CharactersOption = CharactersOption.NONE
    characters: str | None = None
    paginate: bool = False
    regions: str | None = None
    fail_on_error: bool = True

    @classmethod
    def build(
        cls,
        content: bytes,
        file_name: str,
        language: str,
        performance: str,
        use_async_pattern: bool,
        options: OcrOptions | None = None,
    ) -> "OcrRequest":
        opts = options or OcrOptions()
        return cls(
            use_async_pattern=use_async_pattern,
            source_file_name=file_name,
            source_file_content=encode_content(content),
            language=language,
            performance=performance,
            **opts.model_dump(),
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class OcrResponse(BaseModel):
    """Response shape shared by ``ocr_pdf`` and ``action_task``."""

    model_config = ConfigDict(extra="ignore")

    processed_file_content: str | None = None
    base_file_name: str | None = None
    result_code: str | None = None
    result_details: str | None = None


class OcrResult(BaseModel):
    """Decoded terminal success value."""

    model_config = ConfigDict(frozen=True)

    processed_file_content: bytes
    base_file_name: str | None = None
    result_code: str | None = None
    result_details: str | None = None

    @classmethod
    def from_response(cls, response: OcrResponse) -> "OcrResult":
        return cls(
            processed_file_content=decode_content(response.processed_file_content or ""),
            base_file_name=response.base_file_name,
            result_code=response.result_code,
            result_details=response.result_details,
        )


class ResponseKind(str, Enum):
    SUCCESS = "success"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"
    EMPTY_CONTENT = "empty_content"
    UNPARSEABLE = "unparseable"


def classify_response(response: OcrResponse | None) -> ResponseKind:
    """Map a parsed response (or ``None`` for an unparseable body) to its kind."""
    if response is None:
        return ResponseKind.UNPARSEABLE
    code = response.result_code
    if code in IN_PROGRESS_CODES:
        return ResponseKind.IN_PROGRESS
    if code == RESULT_SUCCESS:
        if response.processed_file_content:
            return ResponseKind.SUCCESS
        return ResponseKind.EMPTY_CONTENT
    return ResponseKind.FAILED


def parse_response(text: str) -> OcrResponse | None:
    """Parse a response body; returns None when it is not a usable JSON object."""
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return OcrResponse.model_validate(data)
    except ValidationError:
        return None


def extract_task_id(result_details: str | None) -> str:
    """Return the task id from ``task_id=<id>``, or "" if there is none."""
    if not result_details:
        return ""
    return result_details.strip().removeprefix(TASK_ID_PREFIX).strip()


def encode_content(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def decode_content(content: str) -> bytes:
    try:
        return base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ResponseParseError("Processed file content is not valid base64") from e
