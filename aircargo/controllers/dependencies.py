"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aircargo.application.interfaces import BookingStoreInterface, FlightCatalogInterface
from aircargo.application.reference_ids import RefIdAllocator
from aircargo.application.use_cases import BookingLifecycle, RouteFinder
from aircargo.config.settings import settings
from aircargo.database import get_session
from aircargo.infrastructure.persistence import SQLAlchemyBookingStore, SQLAlchemyFlightCatalog
from aircargo.services.booking_events import BookingEventObserver, booking_observer

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_flight_catalog(session: SessionDep) -> FlightCatalogInterface:
    return SQLAlchemyFlightCatalog(session)


def get_booking_store(session: SessionDep) -> BookingStoreInterface:
    return SQLAlchemyBookingStore(session)


def get_booking_lifecycle(
    store: Annotated[BookingStoreInterface, Depends(get_booking_store)],
    catalog: Annotated[FlightCatalogInterface, Depends(get_flight_catalog)],
) -> BookingLifecycle:
    """Build the lifecycle over the request-scoped stores."""

    allocator = RefIdAllocator(
        store,
        prefix=settings.booking.ref_id_prefix,
        width=settings.booking.ref_id_sequence_width,
    )
    return BookingLifecycle(
        store,
        catalog,
        ref_id_allocator=allocator,
        allocation_attempts=settings.booking.ref_id_allocation_attempts,
    )


def get_route_finder(
    catalog: Annotated[FlightCatalogInterface, Depends(get_flight_catalog)],
) -> RouteFinder:
    return RouteFinder(catalog)


def get_booking_observer() -> BookingEventObserver:
    return booking_observer


BookingLifecycleDep = Annotated[BookingLifecycle, Depends(get_booking_lifecycle)]
RouteFinderDep = Annotated[RouteFinder, Depends(get_route_finder)]
BookingObserverDep = Annotated[BookingEventObserver, Depends(get_booking_observer)]


__all__ = [
    "SessionDep",
    "BookingLifecycleDep",
    "RouteFinderDep",
    "BookingObserverDep",
    "get_booking_lifecycle",
    "get_route_finder",
    "get_booking_observer",
]
