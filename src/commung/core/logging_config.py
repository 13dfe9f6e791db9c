"""Logging setup and the HTTP access log middleware."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

http_logger = logging.getLogger("commung.http")


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the ``commung`` logger tree."""
    root = logging.getLogger("commung")
    root.setLevel(level.upper())
    if not any(getattr(handler, "_commung", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._commung = True  # type: ignore[attr-defined]
        root.addHandler(handler)


async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Log method, path, status and elapsed time for every request."""
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        http_logger.exception("%s %s raised", request.method, request.url.path)
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    http_logger.info(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response
