"""Pydantic schemas used as views in the MVC architecture."""

from .bookings import (
    BookingCreateRequest,
    BookingEnvelope,
    BookingResponse,
    TimelineEventResponse,
)
from .common import ErrorResponse, SuccessResponse
from .routes import (
    DirectRouteResponse,
    FlightResponse,
    RouteSearchResponse,
    RouteSummary,
    TransitRouteResponse,
)

__all__ = [
    "BookingCreateRequest",
    "BookingEnvelope",
    "BookingResponse",
    "TimelineEventResponse",
    "ErrorResponse",
    "SuccessResponse",
    "DirectRouteResponse",
    "FlightResponse",
    "RouteSearchResponse",
    "RouteSummary",
    "TransitRouteResponse",
]
