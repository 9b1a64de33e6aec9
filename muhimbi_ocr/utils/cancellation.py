from __future__ import annotations

import asyncio

from muhimbi_ocr.core.exceptions import OcrCancelledError


def raise_if_cancelled(cancel_event: asyncio.Event | None, task_id: str | None = None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OcrCancelledError(task_id=task_id)


async def wait_or_cancel(seconds: float, cancel_event: asyncio.Event | None, task_id: str | None = None) -> None:
    """Sleep for ``seconds`` unless ``cancel_event`` fires first.

    Raises:
        OcrCancelledError: If the event is set before or during the wait.
    """
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return

    raise_if_cancelled(cancel_event, task_id)
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass
    raise_if_cancelled(cancel_event, task_id)
