"""
Binary file helpers for the OCR input and output documents.

Reads and writes run in a worker thread so the event loop stays free
while large PDFs are moved to or from disk.
"""

from __future__ import annotations

import asyncio
from pathlib import Path


def size_in_mb(num_bytes: int) -> float:
    return num_bytes / 1024.0 / 1024.0


async def read_bytes(path: str | Path) -> bytes:
    """
    Read the whole file at ``path``.

    Args:
      path: Source file path.

    Returns:
      The file content.
    """
    return await asyncio.to_thread(Path(path).read_bytes)


async def write_bytes(path: str | Path, content: bytes) -> Path:
    """
    Write ``content`` to ``path``, replacing any existing file.

    Parent directories are not created; that is left to the caller.

    Args:
      path: Destination file path.
      content: Bytes to persist.

    Returns:
      The destination as a `Path` instance.
    """
    dest = Path(path)
    await asyncio.to_thread(dest.write_bytes, content)
    return dest
