"""OCRPort protocol for the PDF OCR service."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from muhimbi_ocr.domain.models import OcrOptions, OcrResult


@runtime_checkable
class OCRPort(Protocol):  # pragma: no cover - contract only
    """Abstraction over the OCR service used by the console sample."""

    async def __aenter__(self) -> Any: ...

    async def __aexit__(self, *args: Any) -> None: ...

    async def ocr_pdf_file(
        self,
        file_path: str | Path,
        language: str = ...,
        performance: str = ...,
        *,
        options: OcrOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OcrResult: ...

    async def ocr_pdf_file_with_polling(
        self,
        file_path: str | Path,
        language: str = ...,
        performance: str = ...,
        poll_interval_seconds: float = ...,
        *,
        options: OcrOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> OcrResult: ...

    async def save_result(self, result: OcrResult, output_path: str | Path) -> Path: ...

    async def aclose(self) -> None: ...
