"""Adapter-side services invoked around core booking operations."""

from .booking_events import BookingEventObserver, LoggingBookingObserver, booking_observer

__all__ = ["BookingEventObserver", "LoggingBookingObserver", "booking_observer"]
