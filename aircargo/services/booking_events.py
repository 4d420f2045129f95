"""Booking lifecycle event observer.

The lifecycle core never logs. Controllers call the observer after a core
operation has succeeded, and the observer writes one JSON line per event to
the ``aircargo.logs.bookings`` logger and bumps the matching counter.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from aircargo.domain.models import Booking
from aircargo.telemetry import increment_booking_event

BOOKING_CREATED = "BOOKING_CREATED"
BOOKING_DEPARTED = "BOOKING_DEPARTED"
BOOKING_ARRIVED = "BOOKING_ARRIVED"
BOOKING_CANCELLED = "BOOKING_CANCELLED"

booking_logger = logging.getLogger("aircargo.logs.bookings")


class BookingEventObserver(Protocol):
    def booking_created(self, booking: Booking) -> None: ...

    def booking_departed(self, booking: Booking, flight_id: Optional[int] = None) -> None: ...

    def booking_arrived(self, booking: Booking, flight_id: Optional[int] = None) -> None: ...

    def booking_cancelled(self, booking: Booking) -> None: ...


class LoggingBookingObserver:
    """Record lifecycle events as compact JSON log lines."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or booking_logger

    def notify(self, event: str, booking: Booking, **details: Any) -> None:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "booking_id": str(booking.id),
            "ref_id": booking.ref_id,
            "status": booking.status.value,
            **details,
        }
        self.logger.info(json.dumps(payload, default=str, separators=(",", ":")))
        increment_booking_event(event)

    def booking_created(self, booking: Booking) -> None:
        self.notify(
            BOOKING_CREATED,
            booking,
            origin=booking.origin,
            destination=booking.destination,
            pieces=booking.pieces,
            weight_kg=booking.weight_kg,
            flightIds=booking.flight_ids,
        )

    def booking_departed(self, booking: Booking, flight_id: Optional[int] = None) -> None:
        self.notify(BOOKING_DEPARTED, booking, flightId=flight_id)

    def booking_arrived(self, booking: Booking, flight_id: Optional[int] = None) -> None:
        self.notify(BOOKING_ARRIVED, booking, flightId=flight_id)

    def booking_cancelled(self, booking: Booking) -> None:
        self.notify(BOOKING_CANCELLED, booking)


booking_observer = LoggingBookingObserver()


__all__ = [
    "BOOKING_CREATED",
    "BOOKING_DEPARTED",
    "BOOKING_ARRIVED",
    "BOOKING_CANCELLED",
    "BookingEventObserver",
    "LoggingBookingObserver",
    "booking_observer",
]
