"""
Console sample: OCR a PDF through Muhimbi PDF Online and save the result.

Usage:
    muhimbi-ocr "Scan_50 Pages.pdf" OCRResult.pdf --poll-interval 10
    MUHIMBI_API_KEY=... python -m muhimbi_ocr input.pdf output.pdf --sync
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional, Sequence

from muhimbi_ocr.core.config import Settings, get_settings
from muhimbi_ocr.core.exceptions import (
    MuhimbiApiError,
    OcrCancelledError,
    SourceFileNotFoundError,
    exception_chain,
)
from muhimbi_ocr.core.logging import configure_logging
from muhimbi_ocr.domain.ports.ocr_port import OCRPort
from muhimbi_ocr.infrastructure.clients.muhimbi_http import MuhimbiHttpClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


def build_arg_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="muhimbi-ocr",
        description="Run OCR on a PDF with Muhimbi PDF Online and write the searchable PDF.",
    )
    p.add_argument("input", type=Path, help="PDF file to OCR.")
    p.add_argument("output", type=Path, help="Where to write the processed PDF.")
    p.add_argument(
        "--api-key",
        default=settings.API_KEY.get_secret_value(),
        help="API key that came with your subscription (default: $MUHIMBI_API_KEY).",
    )
    p.add_argument("--language", default=settings.LANGUAGE, help="Document's primary language.")
    p.add_argument(
        "--performance",
        default=settings.PERFORMANCE,
        help="OCR performance mode. Unless you have a good reason not to, use 'Slow but accurate'.",
    )
    p.add_argument(
        "--sync",
        action="store_true",
        help="Single blocking request instead of submit-and-poll (not recommended for large files).",
    )
    p.add_argument("--poll-interval", type=float, default=settings.POLL_INTERVAL_SECONDS, help="Seconds between status checks.")
    p.add_argument("--timeout-minutes", type=float, default=settings.TIMEOUT_MINUTES, help="Per-request HTTP timeout.")
    p.add_argument(
        "--skip-certificate-validation",
        action="store_true",
        default=settings.SKIP_CERTIFICATE_VALIDATION,
        help="UNSAFE: accept any TLS certificate. Use only to diagnose SSL issues.",
    )
    p.add_argument("--base-url", default=settings.BASE_URL, help=argparse.SUPPRESS)
    p.add_argument("--log-level", default=settings.LOG_LEVEL)
    p.add_argument("--log-json", action="store_true", default=settings.LOG_JSON)
    return p


def log_exception_chain(exc: BaseException | None) -> None:
    for depth, (name, message) in enumerate(exception_chain(exc), start=1):
        logger.error("Inner(%d): [%s] %s", depth, name, message)


def _install_sigint(cancel_event: asyncio.Event) -> None:
    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError):
        # Windows event loops do not support signal handlers
        pass


async def run(args: argparse.Namespace, client: Optional[OCRPort] = None) -> int:
    cancel_event = asyncio.Event()
    # The event is only observed between polls
    if not args.sync:
        _install_sigint(cancel_event)

    if client is None:
        client = MuhimbiHttpClient(
            api_key=args.api_key,
            timeout_minutes=args.timeout_minutes,
            skip_certificate_validation=args.skip_certificate_validation,
            base_url=args.base_url,
        )

    async with client:
        logger.info("Running OCR...")
        if args.sync:
            result = await client.ocr_pdf_file(
                args.input, args.language, args.performance, cancel_event=cancel_event
            )
        else:
            result = await client.ocr_pdf_file_with_polling(
                args.input,
                args.language,
                args.performance,
                args.poll_interval,
                cancel_event=cancel_event,
            )
        await client.save_result(result, args.output)

    logger.info("'%s' written to output folder.", args.output.name)
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    args = build_arg_parser(settings).parse_args(argv)
    configure_logging(args.log_level, json_format=args.log_json)

    if not args.api_key:
        logger.error("Please provide the API Key that came with your subscription (--api-key or MUHIMBI_API_KEY).")
        return EXIT_ERROR

    try:
        return asyncio.run(run(args))
    except OcrCancelledError as e:
        logger.warning("%s", e.message, extra={"error_code": e.error_code})
        return EXIT_CANCELLED
    except KeyboardInterrupt:
        # --sync runs without a SIGINT handler, so Ctrl-C arrives here
        logger.warning("Interrupted; OCR request abandoned")
        return EXIT_CANCELLED
    except SourceFileNotFoundError as e:
        logger.error("%s", e.message, extra={"error_code": e.error_code})
        return EXIT_ERROR
    except MuhimbiApiError as e:
        logger.error("API Error: %s", e.message, extra={"error_code": e.error_code})
        log_exception_chain(e.__cause__)
        return EXIT_ERROR
    except OSError as e:
        logger.error("%s: %s", type(e).__name__, e)
        log_exception_chain(e.__cause__)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
