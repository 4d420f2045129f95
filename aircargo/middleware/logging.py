"""Request logging middleware for the booking and route endpoints."""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("aircargo.middleware.structured")

REQUEST_ID_HEADER = "X-Request-ID"

# ANSI colours keyed by the first digit of the status code.
_STATUS_COLORS = {
    2: "\u001b[32m",
    3: "\u001b[36m",
    4: "\u001b[33m",
    5: "\u001b[31m",
}
_RESET = "\u001b[0m"

_CONSOLE_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms", "booking", "client_ip")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request, tagged with a request id echoed back to the client.

    Requests that address a single booking also carry the identifier from the
    path, so a booking's HTTP history can be grepped next to its event log.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id

        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query or None,
            "client_ip": request.client.host if request.client else None,
        }

        try:
            response = await call_next(request)
        except Exception as exc:
            entry.update(status_code=500, error=repr(exc), duration_ms=_elapsed_ms(started))
            logger.exception(_console_line(entry))
            raise

        booking_id = request.path_params.get("booking_id")
        if booking_id is not None:
            entry["booking"] = booking_id
        entry.update(status_code=response.status_code, duration_ms=_elapsed_ms(started))

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, _console_line(entry))
        logger.debug(json.dumps(entry, default=str, separators=(",", ":")))

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _console_line(entry: dict[str, Any]) -> str:
    status = entry.get("status_code") or 0
    color = _STATUS_COLORS.get(status // 100, "\u001b[36m")
    message = " ".join(
        f"{name}={entry[name]}" for name in _CONSOLE_FIELDS if entry.get(name) is not None
    )
    return f"{color}{message}{_RESET}"
