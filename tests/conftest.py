from __future__ import annotations

import base64
from typing import Callable

import httpx
import pytest

from muhimbi_ocr.core.config import get_settings
from muhimbi_ocr.infrastructure.clients.muhimbi_http import MuhimbiHttpClient

BASE_URL = "https://api.muhimbi.com/api/"
SUBMIT_PATH = "/api/v1/operations/ocr_pdf"
POLL_PATH = "/api/v1/operations/action_task"

PDF_BYTES = b"%PDF-1.4\n%dummy pdf file\n"
PROCESSED_BYTES = b"%PDF-1.4\n%processed searchable pdf\n"


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def success_payload(content: bytes = PROCESSED_BYTES) -> dict:
    return {
        "processed_file_content": b64(content),
        "base_file_name": "scan",
        "result_code": "Success",
        "result_details": None,
    }


@pytest.fixture
def make_client() -> Callable[..., MuhimbiHttpClient]:
    def _make(handler, **kwargs) -> MuhimbiHttpClient:
        return MuhimbiHttpClient(
            api_key="test-key",
            base_url=BASE_URL,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
