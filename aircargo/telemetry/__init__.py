"""Telemetry helpers and metrics."""

from .metrics import (
    BOOKING_CONFLICTS,
    BOOKING_EVENTS,
    ERROR_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    ROUTE_SEARCHES,
    increment_booking_conflict,
    increment_booking_event,
    observe_request,
    observe_route_search,
)

__all__ = [
    "BOOKING_CONFLICTS",
    "BOOKING_EVENTS",
    "ERROR_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "ROUTE_SEARCHES",
    "increment_booking_conflict",
    "increment_booking_event",
    "observe_request",
    "observe_route_search",
]
