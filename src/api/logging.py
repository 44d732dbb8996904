"""Structured logging and request middleware for the schedule service.

Log lines are key=value pairs so they can be grepped and parsed without a
JSON decoder:

    timestamp=2024-05-01T12:00:00+0000 level=INFO logger=api.timing request_id=ab12 message="..."

Every line written while a request is in flight carries that request's ID.

Example:
    >>> from src.api.logging import setup_logging
    >>> setup_logging("DEBUG")
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"

# Loggers that are chatty at INFO and below
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _quote(text: str) -> str:
    return '"' + text.replace('"', '\\"') + '"'


class StructuredFormatter(logging.Formatter):
    """Render records as ``key=value`` pairs with a quoted message."""

    def format(self, record: logging.LogRecord) -> str:
        fields = [
            ("timestamp", self.formatTime(record, self.datefmt)),
            ("level", record.levelname),
            ("logger", record.name),
            ("request_id", request_id_var.get() or "-"),
            ("message", _quote(record.getMessage())),
        ]
        if record.exc_info:
            trace = self.formatException(record.exc_info).replace("\n", " | ")
            fields.append(("exception", _quote(trace)))
        return " ".join(f"{key}={value}" for key, value in fields)


def setup_logging(log_level: str = "INFO") -> None:
    """Install the structured formatter on the root logger.

    Existing root handlers are replaced so repeated calls (one per app
    startup in tests) do not duplicate output.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR).
    """
    level = log_level.upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(datefmt="%Y-%m-%dT%H:%M:%S%z"))
    handler.setLevel(level)

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, reusing the client's X-Request-ID if sent.

    The ID is stored on ``request.state.request_id``, echoed in the response
    header, and exposed to log records through ``request_id_var``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and add an X-Response-Time header."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.2f}ms"
        logging.getLogger("api.timing").info(
            "method=%s path=%s status=%d duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def add_middleware(app: FastAPI) -> None:
    """Add request ID and timing middleware to the application."""
    # Starlette runs the last-added middleware first; the request ID must
    # be set before timing logs its line.
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
