"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time
from typing import Any, Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from aircargo.telemetry import observe_request

DEFAULT_EXCLUDED_PATHS = ("/metrics",)


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for Prometheus, skipping scrape traffic."""

    def __init__(
        self,
        app: ASGIApp,
        excluded_paths: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
    ) -> None:
        super().__init__(app)
        self.excluded_paths = frozenset(excluded_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            observe_request(
                request.method,
                self._resolve_route(request),
                status_code,
                time.perf_counter() - start_time,
            )

    @staticmethod
    def _resolve_route(request: Request) -> str:
        """Return the matched route template, falling back to the raw path."""

        scope_route: Any = request.scope.get("route")
        path = getattr(scope_route, "path", None)
        return path or request.url.path
