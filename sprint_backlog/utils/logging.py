import logging
import sys
import time
from typing import Awaitable, Callable

from fastapi import Request, Response


def setup_logging(level: str = "INFO") -> None:
    """Setup application logging configuration."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance."""
    return logging.getLogger(name)


_request_logger = get_logger("sprint_backlog.requests")


async def log_requests(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """HTTP middleware logging method, path, status and latency."""

    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        duration_ms = (time.perf_counter() - started) * 1000
        _request_logger.exception(
            "%s %s failed after %.1fms", request.method, request.url.path, duration_ms
        )
        raise

    duration_ms = (time.perf_counter() - started) * 1000
    _request_logger.info(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms
    )
    return response
