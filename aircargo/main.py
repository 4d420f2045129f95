"""FastAPI application factory for the cargo booking service."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import settings
from .controllers import bookings, routes
from .database import dispose_engine, init_models
from .domain.errors import (
    BookingError,
    BookingNotFound,
    BookingValidationError,
    ConcurrencyConflict,
    DuplicateRefId,
    InvalidFlightReference,
    InvalidTransition,
)
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

ERROR_STATUS_CODES: dict[type[BookingError], int] = {
    BookingValidationError: 400,
    InvalidFlightReference: 400,
    InvalidTransition: 400,
    BookingNotFound: 404,
    ConcurrencyConflict: 409,
    DuplicateRefId: 409,
}


def _rotating_handler(path: str, max_bytes: int, fmt: str) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=5, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _configure_logging() -> None:
    """Route application logs to stdout and rotating files.

    Request lines go to stdout only, undecorated. Booking events are written
    to their own file and do not reach the root handlers.
    """

    level = logging.DEBUG if settings.debug else logging.INFO

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console)
    root_logger.addHandler(_rotating_handler(settings.log_file, 1_000_000, LOG_FORMAT))
    root_logger.setLevel(level)

    request_console = logging.StreamHandler(sys.stdout)
    request_console.setFormatter(logging.Formatter("%(message)s"))
    request_logger = logging.getLogger("aircargo.middleware.structured")
    request_logger.handlers = [request_console]
    request_logger.setLevel(level)
    request_logger.propagate = False

    booking_logger = logging.getLogger("aircargo.logs.bookings")
    booking_logger.handlers = [
        _rotating_handler(
            settings.booking_log_file, 500_000, "%(asctime)s | %(levelname)s | %(message)s"
        )
    ]
    booking_logger.setLevel(logging.INFO)
    booking_logger.propagate = False

    for name in ("sqlalchemy.engine", "uvicorn.access", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(type(exc), 400)
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _register_service_routes(app: FastAPI) -> None:
    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"message": settings.app_name, "version": settings.app_version}

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Prometheus scrape endpoint."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def create_app() -> FastAPI:
    """Build the API with middleware, routers and error mapping."""

    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Air cargo booking lifecycle and flight route discovery API",
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(routes.router)
    app.include_router(bookings.router)
    _register_service_routes(app)
    _register_error_handlers(app)

    @app.on_event("startup")
    async def create_tables() -> None:
        await init_models()

    @app.on_event("shutdown")
    async def close_engine() -> None:
        await dispose_engine()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("aircargo.main:app", host=settings.host, port=settings.port, reload=settings.debug)
