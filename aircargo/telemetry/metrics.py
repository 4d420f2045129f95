"""Prometheus metrics for the cargo API."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

NAMESPACE = "aircargo"

REQUEST_COUNT = Counter(
    "http_requests_total",
    "HTTP requests handled, by route template and status code",
    ("method", "route", "status"),
    namespace=NAMESPACE,
)

# Booking writes are a couple of round trips; route searches issue one query per first leg.
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    namespace=NAMESPACE,
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

ERROR_COUNTER = Counter(
    "http_server_errors_total",
    "Requests that ended with a 5xx response",
    ("method", "route"),
    namespace=NAMESPACE,
)

BOOKING_EVENTS = Counter(
    "booking_events_total",
    "Booking lifecycle events emitted after successful operations",
    ("event",),
    namespace=NAMESPACE,
)

BOOKING_CONFLICTS = Counter(
    "booking_conflicts_total",
    "Booking transitions rejected because a concurrent change won the race",
    ("operation",),
    namespace=NAMESPACE,
)

ROUTE_SEARCHES = Counter(
    "route_searches_total",
    "Route searches served, labelled by whether any itinerary was found",
    ("result",),
    namespace=NAMESPACE,
)


def observe_request(method: str, route: str, status_code: int, duration_seconds: float) -> None:
    """Record count, latency and server errors for one request."""

    labels = {"method": method or "UNKNOWN", "route": route or "unknown"}
    REQUEST_COUNT.labels(status=str(status_code), **labels).inc()
    REQUEST_LATENCY.labels(**labels).observe(max(duration_seconds, 0.0))
    if status_code >= 500:
        ERROR_COUNTER.labels(**labels).inc()


def increment_booking_event(event: str) -> None:
    BOOKING_EVENTS.labels(event=event).inc()


def increment_booking_conflict(operation: str) -> None:
    BOOKING_CONFLICTS.labels(operation=operation).inc()


def observe_route_search(option_count: int) -> None:
    ROUTE_SEARCHES.labels(result="found" if option_count else "empty").inc()
