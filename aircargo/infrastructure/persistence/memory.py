"""In-memory flight catalog and booking store.

Both keep the same contracts as the SQLAlchemy adapters. The booking store's
conditional update runs its compare and its write without awaiting in
between, so on a single event loop the pair is atomic.
"""

from __future__ import annotations

import itertools
from datetime import datetime
from typing import Iterable, List, Optional

from aircargo.application.interfaces import BookingStoreInterface, FlightCatalogInterface
from aircargo.domain.errors import DuplicateRefId
from aircargo.domain.models import Booking, BookingStatus, Flight, TimelineEvent
from aircargo.domain.services import BookingStateMachine, as_utc


class InMemoryFlightCatalog(FlightCatalogInterface):
    def __init__(self, flights: Iterable[Flight] = ()):
        self._flights: dict[int, Flight] = {}
        self._ids = itertools.count(1)
        for flight in flights:
            self.add(flight)

    def add(self, flight: Flight) -> Flight:
        """Store a flight, assigning an id when it has none."""

        flight_id = flight.id if flight.id is not None else next(self._ids)
        stored = flight.model_copy(
            update={
                "id": flight_id,
                "origin": flight.origin.strip().upper(),
                "destination": flight.destination.strip().upper(),
            }
        )
        self._flights[flight_id] = stored
        return stored.model_copy()

    async def find_by_route(
        self,
        origin: str,
        destination: str,
        departure_from: datetime,
        departure_to: datetime,
    ) -> List[Flight]:
        return self._select(
            lambda flight: flight.origin == origin
            and flight.destination == destination,
            departure_from,
            departure_to,
        )

    async def find_departures(
        self,
        origin: str,
        departure_from: datetime,
        departure_to: datetime,
        exclude_destination: Optional[str] = None,
    ) -> List[Flight]:
        return self._select(
            lambda flight: flight.origin == origin
            and flight.destination != exclude_destination,
            departure_from,
            departure_to,
        )

    async def get(self, flight_id: int) -> Optional[Flight]:
        flight = self._flights.get(flight_id)
        return flight.model_copy() if flight else None

    async def exists(self, flight_id: int) -> bool:
        return flight_id in self._flights

    def _select(self, predicate, departure_from: datetime, departure_to: datetime) -> List[Flight]:
        window_start, window_end = as_utc(departure_from), as_utc(departure_to)
        matches = [
            flight
            for flight in self._flights.values()
            if predicate(flight)
            and window_start <= as_utc(flight.departure_time) <= window_end
        ]
        matches.sort(key=lambda flight: (as_utc(flight.departure_time), flight.id))
        return [flight.model_copy() for flight in matches]


class InMemoryBookingStore(BookingStoreInterface):
    def __init__(self):
        self._bookings: dict[int, Booking] = {}
        self._ref_index: dict[str, int] = {}
        self._ids = itertools.count(1)

    async def insert(self, booking: Booking) -> Booking:
        if booking.ref_id in self._ref_index:
            raise DuplicateRefId(booking.ref_id)

        booking_id = next(self._ids)
        stored = booking.model_copy(update={"id": booking_id}, deep=True)
        self._bookings[booking_id] = stored
        self._ref_index[stored.ref_id] = booking_id
        return stored.model_copy(deep=True)

    async def conditional_update(
        self,
        booking_id: int,
        expected_statuses: Iterable[BookingStatus],
        new_status: BookingStatus,
        event: TimelineEvent,
    ) -> Optional[Booking]:
        current = self._bookings.get(booking_id)
        if current is None or current.status not in set(expected_statuses):
            return None

        timeline = list(current.timeline)
        if BookingStateMachine.should_record(timeline, new_status):
            timeline.append(event.model_copy())
        updated = current.model_copy(
            update={
                "status": new_status,
                "timeline": timeline,
                "updated_at": event.timestamp,
            },
            deep=True,
        )
        self._bookings[booking_id] = updated
        return updated.model_copy(deep=True)

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        booking = self._bookings.get(booking_id)
        return booking.model_copy(deep=True) if booking else None

    async def find_by_ref_id(self, ref_id: str) -> Optional[Booking]:
        booking_id = self._ref_index.get(ref_id)
        return await self.find_by_id(booking_id) if booking_id is not None else None

    async def latest_ref_id(self, prefix: str) -> Optional[str]:
        candidates = [ref_id for ref_id in self._ref_index if ref_id.startswith(prefix)]
        return max(candidates) if candidates else None


__all__ = ["InMemoryFlightCatalog", "InMemoryBookingStore"]
