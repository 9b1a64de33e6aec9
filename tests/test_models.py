from __future__ import annotations

import pytest

from muhimbi_ocr.core.exceptions import ResponseParseError
from muhimbi_ocr.domain.models import (
    CharactersOption,
    OcrOptions,
    OcrRequest,
    OcrResponse,
    OcrResult,
    ResponseKind,
    classify_response,
    decode_content,
    encode_content,
    extract_task_id,
    parse_response,
)


@pytest.mark.parametrize("data", [b"", b"\x00\xff\x10", b"%PDF-1.7\n" + bytes(range(256)) * 4])
def test_base64_round_trip(data: bytes) -> None:
    assert decode_content(encode_content(data)) == data


def test_decode_rejects_invalid_base64() -> None:
    with pytest.raises(ResponseParseError):
        decode_content("not base64!!")


def test_request_payload_omits_none_fields() -> None:
    req = OcrRequest.build(b"abc", "doc.pdf", "English", "Slow but accurate", True)
    payload = req.to_payload()

    assert payload["source_file_content"] == "YWJj"
    assert payload["use_async_pattern"] is True
    assert payload["characters_option"] == "None"
    assert "characters" not in payload
    assert "regions" not in payload


def test_request_is_immutable() -> None:
    req = OcrRequest.build(b"abc", "doc.pdf", "English", "Slow but accurate", False)
    with pytest.raises(Exception):
        req.language = "German"  # type: ignore[misc]


def test_request_applies_options() -> None:
    opts = OcrOptions(characters_option=CharactersOption.BLACKLIST, characters="|", regions="1:0,0,100,100", fail_on_error=False)
    payload = OcrRequest.build(b"x", "doc.pdf", "English", "Fast", False, opts).to_payload()

    assert payload["characters_option"] == "Blacklist"
    assert payload["characters"] == "|"
    assert payload["regions"] == "1:0,0,100,100"
    assert payload["fail_on_error"] is False


@pytest.mark.parametrize(
    "text",
    ["", "null", "[]", "\"Success\"", "{not json", '{"result_code": 42}'],
)
def test_parse_response_returns_none_for_unusable_bodies(text: str) -> None:
    assert parse_response(text) is None


def test_parse_response_ignores_unknown_keys() -> None:
    resp = parse_response('{"result_code": "Success", "processed_file_content": "YWJj", "extra": 1}')
    assert resp == OcrResponse(result_code="Success", processed_file_content="YWJj")


@pytest.mark.parametrize(
    "response,kind",
    [
        (None, ResponseKind.UNPARSEABLE),
        (OcrResponse(result_code="Accepted"), ResponseKind.IN_PROGRESS),
        (OcrResponse(result_code="Pending"), ResponseKind.IN_PROGRESS),
        (OcrResponse(result_code="Processing"), ResponseKind.IN_PROGRESS),
        (OcrResponse(result_code="Success", processed_file_content="YWJj"), ResponseKind.SUCCESS),
        (OcrResponse(result_code="Success", processed_file_content=""), ResponseKind.EMPTY_CONTENT),
        (OcrResponse(result_code="Success"), ResponseKind.EMPTY_CONTENT),
        (OcrResponse(result_code="InvalidApiKey"), ResponseKind.FAILED),
        (OcrResponse(), ResponseKind.FAILED),
    ],
)
def test_classify_response(response, kind) -> None:
    assert classify_response(response) is kind


@pytest.mark.parametrize(
    "details,expected",
    [
        ("task_id=abc123", "abc123"),
        ("  task_id=abc123 ", "abc123"),
        ("task_id=", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_task_id(details, expected) -> None:
    assert extract_task_id(details) == expected


def test_result_from_response_decodes_content() -> None:
    resp = OcrResponse(
        processed_file_content="YWJj",
        base_file_name="doc",
        result_code="Success",
        result_details="ok",
    )
    result = OcrResult.from_response(resp)

    assert result.processed_file_content == b"abc"
    assert result.base_file_name == "doc"
    assert result.result_details == "ok"
