"""SQLAlchemy adapters exercised against an in-memory SQLite database."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from aircargo.application.use_cases import BookingLifecycle, RouteFinder
from aircargo.domain.errors import ConcurrencyConflict, DuplicateRefId
from aircargo.domain.models import Booking, BookingStatus, TimelineEvent
from aircargo.infrastructure.persistence import SQLAlchemyBookingStore, SQLAlchemyFlightCatalog
from aircargo.models import Base
from aircargo.models import Flight as FlightEntity

from conftest import SteppingClock, utc


def run_with_session(scenario):
    """Run ``scenario(session)`` against a freshly created schema."""

    async def runner():
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
        try:
            async with factory() as session:
                session.add_all(
                    [
                        FlightEntity(
                            flight_number="SG301",
                            airline_name="SpiceJet",
                            origin="DEL",
                            destination="HYD",
                            departure_time=utc(2024, 5, 10, 8),
                            arrival_time=utc(2024, 5, 10, 10, 30),
                        ),
                        FlightEntity(
                            flight_number="SG302",
                            airline_name="SpiceJet",
                            origin="HYD",
                            destination="BLR",
                            departure_time=utc(2024, 5, 10, 14),
                            arrival_time=utc(2024, 5, 10, 15, 30),
                        ),
                        FlightEntity(
                            flight_number="SG303",
                            airline_name="SpiceJet",
                            origin="HYD",
                            destination="BLR",
                            departure_time=utc(2024, 5, 10, 9),
                            arrival_time=utc(2024, 5, 10, 10, 30),
                        ),
                    ]
                )
                await session.commit()
                return await scenario(session)
        finally:
            await engine.dispose()

    return asyncio.run(runner())


def _booking(ref_id: str = "BOOK-20240510-000001") -> Booking:
    created_at = utc(2024, 5, 10, 6)
    return Booking(
        ref_id=ref_id,
        origin="DEL",
        destination="BLR",
        pieces=4,
        weight_kg=120,
        status=BookingStatus.BOOKED,
        flight_ids=[1, 2],
        timeline=[TimelineEvent(event=BookingStatus.BOOKED, timestamp=created_at)],
        created_at=created_at,
        updated_at=created_at,
    )


def test_insert_and_find():
    async def scenario(session):
        store = SQLAlchemyBookingStore(session)
        inserted = await store.insert(_booking())
        by_id = await store.find_by_id(inserted.id)
        by_ref = await store.find_by_ref_id("BOOK-20240510-000001")
        return inserted, by_id, by_ref

    inserted, by_id, by_ref = run_with_session(scenario)

    assert inserted.id is not None
    assert by_id == by_ref
    assert by_id.flight_ids == [1, 2]
    assert by_id.timeline[0].event == BookingStatus.BOOKED
    assert by_id.created_at == utc(2024, 5, 10, 6)


def test_duplicate_reference_is_rejected():
    async def scenario(session):
        store = SQLAlchemyBookingStore(session)
        await store.insert(_booking())
        with pytest.raises(DuplicateRefId):
            await store.insert(_booking())
        return await store.latest_ref_id("BOOK-20240510-")

    assert run_with_session(scenario) == "BOOK-20240510-000001"


def test_other_integrity_errors_are_not_reported_as_duplicates():
    async def scenario(session):
        store = SQLAlchemyBookingStore(session)
        broken = _booking().model_copy(update={"origin": None})
        with pytest.raises(IntegrityError) as excinfo:
            await store.insert(broken)
        assert "origin" in str(excinfo.value.orig)

        await store.insert(_booking())
        return await store.latest_ref_id("BOOK-20240510-")

    assert run_with_session(scenario) == "BOOK-20240510-000001"


def test_conditional_update_matches_once():
    async def scenario(session):
        store = SQLAlchemyBookingStore(session)
        booking = await store.insert(_booking())
        event = TimelineEvent(event=BookingStatus.CANCELLED, timestamp=utc(2024, 5, 10, 7))
        first = await store.conditional_update(
            booking.id, [BookingStatus.BOOKED], BookingStatus.CANCELLED, event
        )
        second = await store.conditional_update(
            booking.id, [BookingStatus.BOOKED], BookingStatus.CANCELLED, event
        )
        return first, second, await store.find_by_id(booking.id)

    first, second, stored = run_with_session(scenario)

    assert first.status == BookingStatus.CANCELLED
    assert second is None
    assert [entry.event for entry in stored.timeline] == [
        BookingStatus.BOOKED,
        BookingStatus.CANCELLED,
    ]
    assert stored.updated_at == utc(2024, 5, 10, 7)


def test_conditional_update_on_missing_booking():
    async def scenario(session):
        store = SQLAlchemyBookingStore(session)
        event = TimelineEvent(event=BookingStatus.DEPARTED, timestamp=utc(2024, 5, 10, 7))
        return await store.conditional_update(
            404, [BookingStatus.BOOKED], BookingStatus.DEPARTED, event
        )

    assert run_with_session(scenario) is None


def test_latest_reference_is_scoped_to_day():
    async def scenario(session):
        store = SQLAlchemyBookingStore(session)
        for ref_id in ("BOOK-20240509-000050", "BOOK-20240510-000002", "BOOK-20240510-000011"):
            await store.insert(_booking(ref_id))
        return (
            await store.latest_ref_id("BOOK-20240510-"),
            await store.latest_ref_id("BOOK-20240511-"),
        )

    assert run_with_session(scenario) == ("BOOK-20240510-000011", None)


def test_lifecycle_over_sql_store():
    async def scenario(session):
        lifecycle = BookingLifecycle(
            SQLAlchemyBookingStore(session),
            SQLAlchemyFlightCatalog(session),
            clock=SteppingClock(),
        )
        booking = await lifecycle.create("del", "blr", 2, 40, flight_ids=[1, 2])
        await lifecycle.depart(booking.ref_id, flight_id=1)
        arrived = await lifecycle.arrive(str(booking.id), flight_id=2)
        with pytest.raises(ConcurrencyConflict):
            await lifecycle._apply(booking, BookingStatus.CANCELLED, frozenset({BookingStatus.BOOKED}))
        return arrived, await lifecycle.history(booking.ref_id)

    arrived, history = run_with_session(scenario)

    assert arrived.ref_id == "BOOK-20240510-000001"
    assert arrived.status == BookingStatus.ARRIVED
    assert [(entry.event, entry.flight_id) for entry in history.timeline] == [
        (BookingStatus.BOOKED, None),
        (BookingStatus.DEPARTED, 1),
        (BookingStatus.ARRIVED, 2),
    ]


def test_flight_catalog_queries():
    async def scenario(session):
        catalog = SQLAlchemyFlightCatalog(session)
        return (
            await catalog.exists(1),
            await catalog.exists(99),
            await catalog.get(2),
            await catalog.find_departures(
                "DEL", utc(2024, 5, 10, 0), utc(2024, 5, 10, 23), exclude_destination="HYD"
            ),
        )

    exists, missing, flight, departures = run_with_session(scenario)

    assert exists is True
    assert missing is False
    assert flight.flight_number == "SG302"
    assert flight.departure_time == utc(2024, 5, 10, 14)
    assert departures == []


def test_route_finder_over_sql_catalog():
    async def scenario(session):
        return await RouteFinder(SQLAlchemyFlightCatalog(session)).find_routes(
            "DEL", "BLR", date(2024, 5, 10)
        )

    result = run_with_session(scenario)

    assert result.direct == []
    assert [(route.second_leg.flight_number, route.layover_duration, route.total_duration)
            for route in result.transit] == [("SG302", 210, 450)]
