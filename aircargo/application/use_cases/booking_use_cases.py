import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from aircargo.application.interfaces import BookingStoreInterface, FlightCatalogInterface
from aircargo.application.reference_ids import RefIdAllocator
from aircargo.domain.errors import (
    BookingNotFound,
    BookingValidationError,
    ConcurrencyConflict,
    DuplicateRefId,
    InvalidFlightReference,
    InvalidTransition,
)
from aircargo.domain.models import Booking, BookingStatus, Flight, TimelineEvent
from aircargo.domain.services import (
    BookingStateMachine,
    FlightDomainService,
    as_utc,
    is_record_id,
    utcnow,
)

logger = logging.getLogger(__name__)

DEPART_FROM = frozenset({BookingStatus.BOOKED})
# Direct BOOKED -> ARRIVED covers itineraries that never report a departure.
ARRIVE_FROM = frozenset({BookingStatus.DEPARTED, BookingStatus.BOOKED})
CANCEL_FROM = frozenset({BookingStatus.BOOKED, BookingStatus.DEPARTED})


class BookingLifecycle:
    """State machine for cargo bookings built on the store's conditional write.

    Every status change reads the booking, checks the observed status
    locally and then issues a compare-and-swap keyed on that observed
    status. When another caller changed the status in between, the write
    matches nothing and ``ConcurrencyConflict`` is raised. Nothing here
    retries a conflict; callers re-read and decide.
    """

    def __init__(
        self,
        booking_store: BookingStoreInterface,
        flight_catalog: FlightCatalogInterface,
        ref_id_allocator: Optional[RefIdAllocator] = None,
        allocation_attempts: int = 3,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.booking_store = booking_store
        self.flight_catalog = flight_catalog
        self.ref_id_allocator = ref_id_allocator or RefIdAllocator(booking_store)
        self.allocation_attempts = max(1, allocation_attempts)
        self.clock = clock

    async def create(
        self,
        origin: str,
        destination: str,
        pieces: int,
        weight_kg: int,
        flight_ids: Optional[Iterable[int]] = None,
    ) -> Booking:
        """Create a booking in BOOKED status with a fresh reference"""
        origin, destination = self._validate_route(origin, destination)
        self._validate_cargo(pieces, weight_kg)
        flight_ids = list(flight_ids or [])

        missing = [
            flight_id
            for flight_id in flight_ids
            if not is_record_id(flight_id)
            or not await self.flight_catalog.exists(flight_id)
        ]
        if missing:
            raise InvalidFlightReference(missing)

        created_at = self.clock()
        last_error: Optional[DuplicateRefId] = None
        for attempt in range(1, self.allocation_attempts + 1):
            ref_id = await self.ref_id_allocator.allocate(created_at)
            booking = Booking(
                ref_id=ref_id,
                origin=origin,
                destination=destination,
                pieces=pieces,
                weight_kg=weight_kg,
                status=BookingStateMachine.INITIAL,
                flight_ids=flight_ids,
                timeline=[
                    TimelineEvent(event=BookingStateMachine.INITIAL, timestamp=created_at)
                ],
                created_at=created_at,
                updated_at=created_at,
            )
            try:
                return await self.booking_store.insert(booking)
            except DuplicateRefId as exc:
                logger.warning(
                    "Reference %s already taken (attempt %d/%d)",
                    ref_id,
                    attempt,
                    self.allocation_attempts,
                )
                last_error = exc

        raise last_error

    async def get(self, identifier: str) -> Booking:
        return await self._resolve(identifier)

    async def flights_for(self, booking: Booking) -> List[Flight]:
        """Catalog records for the booking's flights, skipping ids no longer catalogued"""
        flights = [await self.flight_catalog.get(flight_id) for flight_id in booking.flight_ids]
        return [flight for flight in flights if flight is not None]

    async def history(self, identifier: str) -> Booking:
        """Booking with its timeline ordered oldest first"""
        booking = await self._resolve(identifier)
        timeline = sorted(booking.timeline, key=lambda entry: as_utc(entry.timestamp))
        return booking.model_copy(update={"timeline": timeline})

    async def transition(
        self,
        identifier: str,
        target: BookingStatus,
        allowed_from: Iterable[BookingStatus],
        flight_id: Optional[int] = None,
    ) -> Booking:
        booking = await self._resolve(identifier)
        return await self._apply(booking, target, frozenset(allowed_from), flight_id)

    async def depart(self, identifier: str, flight_id: Optional[int] = None) -> Booking:
        return await self.transition(
            identifier, BookingStatus.DEPARTED, DEPART_FROM, flight_id
        )

    async def arrive(self, identifier: str, flight_id: Optional[int] = None) -> Booking:
        return await self.transition(
            identifier, BookingStatus.ARRIVED, ARRIVE_FROM, flight_id
        )

    async def cancel(self, identifier: str) -> Booking:
        booking = await self._resolve(identifier)
        if booking.status == BookingStatus.ARRIVED:
            raise InvalidTransition(
                booking.status.value,
                BookingStatus.CANCELLED.value,
                "Cannot cancel booking that has already ARRIVED",
            )
        return await self._apply(booking, BookingStatus.CANCELLED, CANCEL_FROM)

    async def _apply(
        self,
        booking: Booking,
        target: BookingStatus,
        allowed_from: frozenset,
        flight_id: Optional[int] = None,
    ) -> Booking:
        if booking.status not in allowed_from or not BookingStateMachine.is_allowed(
            booking.status, target
        ):
            raise InvalidTransition(booking.status.value, target.value)

        event = TimelineEvent(
            event=target,
            timestamp=self._next_timestamp(booking),
            flight_id=flight_id,
        )
        # Guard on the status that was read, not on every allowed source.
        updated = await self.booking_store.conditional_update(
            booking.id, {booking.status}, target, event
        )
        if updated is None:
            raise ConcurrencyConflict(booking.ref_id, target.value)
        return updated

    async def _resolve(self, identifier) -> Booking:
        key = str(identifier).strip() if identifier is not None else ""
        if not key:
            raise BookingValidationError("A booking identifier is required")

        booking = None
        if key.isdigit() and is_record_id(int(key)):
            booking = await self.booking_store.find_by_id(int(key))
        if booking is None:
            booking = await self.booking_store.find_by_ref_id(key.upper())
        if booking is None:
            raise BookingNotFound(key)
        return booking

    def _next_timestamp(self, booking: Booking) -> datetime:
        now = self.clock()
        if booking.timeline:
            last = max(as_utc(entry.timestamp) for entry in booking.timeline)
            if last > now:
                return last
        return now

    @staticmethod
    def _validate_route(origin: str, destination: str) -> List[str]:
        codes = []
        for field, value in (("origin", origin), ("destination", destination)):
            if not isinstance(value, str) or not value.strip():
                raise BookingValidationError(f"{field} is required")
            codes.append(FlightDomainService.normalize_airport_code(value))
        return codes

    @staticmethod
    def _validate_cargo(pieces: int, weight_kg: int) -> None:
        if isinstance(pieces, bool) or not isinstance(pieces, int) or pieces < 1:
            raise BookingValidationError("Pieces must be a positive integer")
        if isinstance(weight_kg, bool) or not isinstance(weight_kg, int) or weight_kg < 0:
            raise BookingValidationError("weight_kg must be a non-negative integer")
