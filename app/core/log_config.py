"""Structured logging for the API.

Application modules keep using ``logging.getLogger(__name__)``; every record
goes through structlog's ``ProcessorFormatter`` so that stdlib and structlog
lines share one format. Request handling binds a ``request_id`` to the
structlog context, which ``merge_contextvars`` copies onto every line logged
while the request is served.
"""

import logging
import sys
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

REQUEST_ID_HEADER = "X-Request-ID"

# Probes hit these every few seconds
UNLOGGED_PATHS = frozenset({"/health"})

CHATTY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore", "botocore", "boto3")


def _processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer() -> Any:
    if settings.DEBUG:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging() -> None:
    """Route stdlib and structlog output to stdout: JSON, or console lines under DEBUG."""
    processors = _processors()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer()],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel("DEBUG" if settings.DEBUG else settings.LOG_LEVEL.upper())

    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``request`` line per API call, tagged with a request id.

    The id comes from the ``X-Request-ID`` header when the caller sends one
    and is echoed back on the response. Only the path is logged: media URLs
    carry their access token in the query string.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        logger = structlog.get_logger("http")
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        event = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            "client": request.client.host if request.client else "unknown",
        }
        if response.status_code >= 500:
            await logger.awarning("request", **event)
        else:
            await logger.ainfo("request", **event)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
