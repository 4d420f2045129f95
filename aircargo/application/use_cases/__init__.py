"""Use cases orchestrating the domain against its storage contracts."""

from .booking_use_cases import BookingLifecycle
from .route_use_cases import RouteFinder

__all__ = ["BookingLifecycle", "RouteFinder"]
