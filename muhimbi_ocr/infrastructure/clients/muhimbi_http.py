"""Async httpx client for the Muhimbi PDF Online OCR API.

Endpoints:
- POST v1/operations/ocr_pdf                     -> OcrResponse JSON
- GET  v1/operations/action_task?task_id=<id>    -> OcrResponse JSON

With ``use_async_pattern`` the submit answers ``Accepted`` and carries
``task_id=<id>`` in ``result_details``; the task is then polled until it
reaches a terminal result code.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from pathlib import Path
from typing import Any, Optional

import httpx

from muhimbi_ocr.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_LANGUAGE,
    DEFAULT_PERFORMANCE,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_TIMEOUT_MINUTES,
    Settings,
)
from muhimbi_ocr.core.exceptions import (
    EmptyResultError,
    HttpStatusError,
    OcrFailedError,
    ResponseParseError,
    SourceFileNotFoundError,
    TransportError,
    format_exception_chain,
)
from muhimbi_ocr.core.logging import task_id_context
from muhimbi_ocr.domain.models import (
    RESULT_ACCEPTED,
    OcrOptions,
    OcrRequest,
    OcrResponse,
    OcrResult,
    ResponseKind,
    classify_response,
    extract_task_id,
    parse_response,
)
from muhimbi_ocr.utils.cancellation import raise_if_cancelled, wait_or_cancel
from muhimbi_ocr.utils.io_utils import read_bytes, size_in_mb, write_bytes

logger = logging.getLogger(__name__)

OCR_PDF_PATH = "v1/operations/ocr_pdf"
ACTION_TASK_PATH = "v1/operations/action_task"


def build_ssl_context(skip_certificate_validation: bool = False) -> ssl.SSLContext:
    """TLS context restricted to TLS 1.2 and 1.3."""
    ctx = ssl.create_default_context()
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    ctx.maximum_version = ssl.TLSVersion.TLSv1_3
    if skip_certificate_validation:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


class MuhimbiHttpClient:
    """Client for the Muhimbi ``ocr_pdf`` operation.

    One ``httpx.AsyncClient`` is opened at construction and released by
    ``aclose()`` (or leaving ``async with``). Independent OCR calls may run
    concurrently on the same instance.

    Args:
        api_key: Subscription API key, sent as the ``api_key`` header.
        timeout_minutes: Per-request HTTP timeout. Does not bound the whole
            poll sequence.
        skip_certificate_validation: Disable TLS certificate checks. Unsafe;
            only for diagnosing broken TLS interception.
        base_url: API root.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        api_key: str,
        timeout_minutes: float = DEFAULT_TIMEOUT_MINUTES,
        skip_certificate_validation: bool = False,
        *,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must be a non-empty string")
        if timeout_minutes <= 0:
            raise ValueError("timeout_minutes must be positive")
        if skip_certificate_validation:
            logger.warning("TLS certificate validation is disabled; connections are not authenticated")

        self.base_url = base_url
        self.timeout = timeout_minutes * 60.0
        self._closed = False
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=self.timeout,
            verify=build_ssl_context(skip_certificate_validation),
            transport=transport,
            headers={"api_key": api_key, "Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "MuhimbiHttpClient":
        return cls(
            api_key=settings.API_KEY.get_secret_value(),
            timeout_minutes=settings.TIMEOUT_MINUTES,
            skip_certificate_validation=settings.SKIP_CERTIFICATE_VALIDATION,
            base_url=settings.BASE_URL,
            **kwargs,
        )

    async def __aenter__(self) -> "MuhimbiHttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def ocr_pdf(
        self,
        content: bytes,
        file_name: str,
        language: str = DEFAULT_LANGUAGE,
        performance: str = DEFAULT_PERFORMANCE,
        *,
        options: OcrOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OcrResult:
        """OCR ``content`` in a single synchronous request."""
        request = OcrRequest.build(content, file_name, language, performance, False, options)
        return await self._ocr_pdf_internal(request, DEFAULT_POLL_INTERVAL_SECONDS, cancel_event)

    async def ocr_pdf_with_polling(
        self,
        content: bytes,
        file_name: str,
        language: str = DEFAULT_LANGUAGE,
        performance: str = DEFAULT_PERFORMANCE,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        *,
        options: OcrOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OcrResult:
        """Submit ``content`` as a background task and poll until it finishes.

        Recommended for large files, where a single request would outlive
        connection timeouts.
        """
        request = OcrRequest.build(content, file_name, language, performance, True, options)
        return await self._ocr_pdf_internal(request, poll_interval_seconds, cancel_event)

    async def ocr_pdf_file(
        self,
        file_path: str | Path,
        language: str = DEFAULT_LANGUAGE,
        performance: str = DEFAULT_PERFORMANCE,
        *,
        options: OcrOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OcrResult:
        content, file_name = await self._read_source(file_path)
        return await self.ocr_pdf(
            content, file_name, language, performance, options=options, cancel_event=cancel_event
        )

    async def ocr_pdf_file_with_polling(
        self,
        file_path: str | Path,
        language: str = DEFAULT_LANGUAGE,
        performance: str = DEFAULT_PERFORMANCE,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        *,
        options: OcrOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OcrResult:
        content, file_name = await self._read_source(file_path)
        return await self.ocr_pdf_with_polling(
            content,
            file_name,
            language,
            performance,
            poll_interval_seconds,
            options=options,
            cancel_event=cancel_event,
        )

    async def save_result(self, result: OcrResult, output_path: str | Path) -> Path:
        """Write the processed PDF to ``output_path``."""
        dest = await write_bytes(output_path, result.processed_file_content)
        logger.info("Result saved to: %s", dest)
        return dest

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _read_source(self, file_path: str | Path) -> tuple[bytes, str]:
        path = Path(file_path)
        if not path.is_file():
            raise SourceFileNotFoundError(str(file_path))
        content = await read_bytes(path)
        logger.info("File: %s", path.name, extra={"file_name": path.name})
        logger.info("File size: %.2f MB", size_in_mb(len(content)))
        return content, path.name

    async def _ocr_pdf_internal(
        self,
        request: OcrRequest,
        poll_interval_seconds: float,
        cancel_event: asyncio.Event | None,
    ) -> OcrResult:
        logger.info("Sending OCR request to Muhimbi API (async=%s)...", request.use_async_pattern)
        raise_if_cancelled(cancel_event)

        response = await self._send("POST", OCR_PDF_PATH, json=request.to_payload())
        body = self._check_status(response)

        parsed = parse_response(body)
        if parsed is None:
            raise ResponseParseError(body=body)

        if request.use_async_pattern and parsed.result_code == RESULT_ACCEPTED:
            logger.debug("Async response: %s", body)
            task_id = extract_task_id(parsed.result_details)
            if not task_id:
                raise OcrFailedError(
                    parsed.result_code,
                    parsed.result_details,
                    message=f"Failed to get task ID from async response. Response: {body}",
                )
            logger.info("Task submitted. Task ID: %s", task_id)
            with task_id_context(task_id):
                return await self._poll_for_result(task_id, poll_interval_seconds, cancel_event)

        return self._to_result(parsed)

    async def _poll_for_result(
        self,
        task_id: str,
        poll_interval_seconds: float,
        cancel_event: asyncio.Event | None,
    ) -> OcrResult:
        poll_count = 0
        while True:
            poll_count += 1
            await wait_or_cancel(poll_interval_seconds, cancel_event, task_id)

            logger.info("Polling for result (attempt %d)...", poll_count, extra={"poll_attempt": poll_count})
            response = await self._send(
                "GET", ACTION_TASK_PATH, params={"task_id": task_id}, context="while polling"
            )
            body = self._check_status(response)

            parsed = parse_response(body)
            kind = classify_response(parsed)
            if kind is ResponseKind.UNPARSEABLE:
                # Transient: keep polling until a usable answer or cancellation.
                logger.warning("Unparseable poll response, retrying: %.200s", body)
                continue
            if kind is ResponseKind.IN_PROGRESS:
                logger.info("Task status: %s", parsed.result_code, extra={"result_code": parsed.result_code})
                continue
            return self._to_result(parsed)

    async def _send(self, method: str, url: str, *, context: str = "", **kwargs: Any) -> httpx.Response:
        suffix = f" {context}" if context else ""
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out{suffix}: {format_exception_chain(e)}. Consider increasing the timeout value.",
                cause=e,
                timeout=True,
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"HTTP request failed{suffix}: {format_exception_chain(e)}", cause=e) from e

    @staticmethod
    def _check_status(response: httpx.Response) -> str:
        body = response.text
        if not response.is_success:
            logger.warning(
                "API returned %d %s", response.status_code, response.reason_phrase,
                extra={"http_status": response.status_code},
            )
            raise HttpStatusError(response.status_code, response.reason_phrase, body)
        return body

    @staticmethod
    def _to_result(response: OcrResponse) -> OcrResult:
        kind = classify_response(response)
        if kind is ResponseKind.EMPTY_CONTENT:
            raise EmptyResultError(response.result_code, response.result_details)
        if kind is not ResponseKind.SUCCESS:
            raise OcrFailedError(response.result_code, response.result_details)

        logger.info("OCR completed successfully. Result: %s", response.result_code)
        return OcrResult.from_response(response)
