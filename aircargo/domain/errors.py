"""Errors raised by the booking lifecycle and its storage contracts."""

from __future__ import annotations

from typing import Iterable, Optional


class BookingError(Exception):
    """Base class for booking failures surfaced to callers."""

    code = "booking_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BookingValidationError(BookingError):
    """Malformed or missing input, detected before touching storage."""

    code = "validation_error"


class InvalidFlightReference(BookingError):
    """A booking references flights that do not exist in the catalog."""

    code = "invalid_flight_reference"

    def __init__(self, flight_ids: Iterable[int]) -> None:
        self.flight_ids = list(flight_ids)
        super().__init__(
            "One or more flight IDs are invalid: "
            + ", ".join(str(flight_id) for flight_id in self.flight_ids)
        )


class BookingNotFound(BookingError):
    code = "not_found"

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__("Booking not found")


class InvalidTransition(BookingError):
    """The requested status is not reachable from the observed status."""

    code = "invalid_transition"

    def __init__(self, current: str, target: str, message: Optional[str] = None) -> None:
        self.current = current
        self.target = target
        super().__init__(
            message or f"Cannot move booking with status {current} to {target}"
        )


class ConcurrencyConflict(BookingError):
    """The guarded write lost the race against another status change."""

    code = "concurrency_conflict"

    def __init__(self, identifier: str, target: str) -> None:
        self.identifier = identifier
        self.target = target
        super().__init__(
            f"Booking update to {target} failed. "
            "The booking may have been modified by another operation."
        )


class DuplicateRefId(BookingError):
    code = "duplicate_ref_id"

    def __init__(self, ref_id: str) -> None:
        self.ref_id = ref_id
        super().__init__(f"Booking reference {ref_id} already exists")


__all__ = [
    "BookingError",
    "BookingValidationError",
    "InvalidFlightReference",
    "BookingNotFound",
    "InvalidTransition",
    "ConcurrencyConflict",
    "DuplicateRefId",
]
