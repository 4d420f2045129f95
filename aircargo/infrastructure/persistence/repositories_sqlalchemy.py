from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from aircargo.application.interfaces import BookingStoreInterface, FlightCatalogInterface
from aircargo.domain.errors import DuplicateRefId
from aircargo.domain.models import Booking, BookingStatus, Flight, TimelineEvent
from aircargo.domain.services import as_utc
from aircargo.models.booking import Booking as BookingEntity
from aircargo.models.booking import BookingEvent as BookingEventEntity
from aircargo.models.flight import Flight as FlightEntity


def _is_ref_id_collision(exc: IntegrityError) -> bool:
    """True when the violated constraint is the unique index on bookings.ref_id"""
    return "ref_id" in str(exc.orig)


def _flight_to_domain(entity: FlightEntity) -> Flight:
    return Flight(
        id=entity.id,
        flight_number=entity.flight_number,
        airline_name=entity.airline_name,
        origin=entity.origin,
        destination=entity.destination,
        departure_time=as_utc(entity.departure_time),
        arrival_time=as_utc(entity.arrival_time),
    )


def _booking_to_domain(entity: BookingEntity) -> Booking:
    return Booking(
        id=entity.id,
        ref_id=entity.ref_id,
        origin=entity.origin,
        destination=entity.destination,
        pieces=entity.pieces,
        weight_kg=entity.weight_kg,
        status=BookingStatus(entity.status),
        flight_ids=list(entity.flight_ids or []),
        timeline=[
            TimelineEvent(
                event=BookingStatus(event.event),
                timestamp=as_utc(event.timestamp),
                flight_id=event.flight_id,
            )
            for event in entity.events
        ],
        created_at=as_utc(entity.created_at),
        updated_at=as_utc(entity.updated_at),
    )


class SQLAlchemyFlightCatalog(FlightCatalogInterface):
    """SQLAlchemy implementation of the flight catalog"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_route(
        self,
        origin: str,
        destination: str,
        departure_from: datetime,
        departure_to: datetime,
    ) -> List[Flight]:
        result = await self.session.execute(
            select(FlightEntity)
            .where(
                FlightEntity.origin == origin,
                FlightEntity.destination == destination,
                FlightEntity.departure_time >= departure_from,
                FlightEntity.departure_time <= departure_to,
            )
            .order_by(FlightEntity.departure_time, FlightEntity.id)
        )
        return [_flight_to_domain(row) for row in result.scalars().all()]

    async def find_departures(
        self,
        origin: str,
        departure_from: datetime,
        departure_to: datetime,
        exclude_destination: Optional[str] = None,
    ) -> List[Flight]:
        query = select(FlightEntity).where(
            FlightEntity.origin == origin,
            FlightEntity.departure_time >= departure_from,
            FlightEntity.departure_time <= departure_to,
        )
        if exclude_destination is not None:
            query = query.where(FlightEntity.destination != exclude_destination)

        result = await self.session.execute(
            query.order_by(FlightEntity.departure_time, FlightEntity.id)
        )
        return [_flight_to_domain(row) for row in result.scalars().all()]

    async def get(self, flight_id: int) -> Optional[Flight]:
        entity = await self.session.get(FlightEntity, flight_id)
        return _flight_to_domain(entity) if entity else None

    async def exists(self, flight_id: int) -> bool:
        result = await self.session.execute(
            select(FlightEntity.id).where(FlightEntity.id == flight_id)
        )
        return result.scalar_one_or_none() is not None


class SQLAlchemyBookingStore(BookingStoreInterface):
    """SQLAlchemy implementation of the booking store.

    The conditional update is a single ``UPDATE ... WHERE id = :id AND status
    IN (:expected)``. The database evaluates the guard against the row it
    locks, so of two racing writers at most one sees a matched row.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, booking: Booking) -> Booking:
        entity = BookingEntity(
            ref_id=booking.ref_id,
            origin=booking.origin,
            destination=booking.destination,
            pieces=booking.pieces,
            weight_kg=booking.weight_kg,
            status=booking.status,
            flight_ids=list(booking.flight_ids),
            created_at=booking.created_at,
            updated_at=booking.updated_at or booking.created_at,
            events=[
                BookingEventEntity(
                    event=event.event,
                    timestamp=event.timestamp,
                    flight_id=event.flight_id,
                )
                for event in booking.timeline
            ],
        )
        self.session.add(entity)
        try:
            await self.session.flush()
            booking_id = entity.id
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if _is_ref_id_collision(exc):
                raise DuplicateRefId(booking.ref_id) from exc
            raise

        return await self.find_by_id(booking_id)

    async def conditional_update(
        self,
        booking_id: int,
        expected_statuses: Iterable[BookingStatus],
        new_status: BookingStatus,
        event: TimelineEvent,
    ) -> Optional[Booking]:
        expected = [BookingStatus(status) for status in expected_statuses]
        result = await self.session.execute(
            update(BookingEntity)
            .where(
                BookingEntity.id == booking_id,
                BookingEntity.status.in_(expected),
            )
            .values(status=new_status, updated_at=event.timestamp)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.session.rollback()
            return None

        last_event = await self.session.scalar(
            select(BookingEventEntity.event)
            .where(BookingEventEntity.booking_id == booking_id)
            .order_by(BookingEventEntity.id.desc())
            .limit(1)
        )
        if last_event is None or BookingStatus(last_event) != new_status:
            self.session.add(
                BookingEventEntity(
                    booking_id=booking_id,
                    event=new_status,
                    timestamp=event.timestamp,
                    flight_id=event.flight_id,
                )
            )
        await self.session.commit()
        return await self.find_by_id(booking_id)

    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        return await self._find_one(BookingEntity.id == booking_id)

    async def find_by_ref_id(self, ref_id: str) -> Optional[Booking]:
        return await self._find_one(BookingEntity.ref_id == ref_id)

    async def latest_ref_id(self, prefix: str) -> Optional[str]:
        result = await self.session.execute(
            select(BookingEntity.ref_id)
            .where(BookingEntity.ref_id.startswith(prefix, autoescape=True))
            .order_by(BookingEntity.ref_id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _find_one(self, criterion) -> Optional[Booking]:
        result = await self.session.execute(
            select(BookingEntity)
            .where(criterion)
            .options(selectinload(BookingEntity.events))
            .execution_options(populate_existing=True)
        )
        entity = result.scalar_one_or_none()
        return _booking_to_domain(entity) if entity else None
