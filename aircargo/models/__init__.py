"""SQLAlchemy models backing the flight catalog and booking store."""

from .base import Base
from .booking import Booking, BookingEvent  # noqa: F401
from .flight import Flight  # noqa: F401

__all__ = ["Base", "Booking", "BookingEvent", "Flight"]
