"""Booking controller exposing the cargo lifecycle."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status

from aircargo.application.use_cases import BookingLifecycle
from aircargo.controllers.dependencies import BookingLifecycleDep, BookingObserverDep
from aircargo.domain.errors import ConcurrencyConflict
from aircargo.domain.models import Booking
from aircargo.domain.services import MAX_RECORD_ID
from aircargo.telemetry import increment_booking_conflict
from aircargo.views import BookingCreateRequest, BookingEnvelope, BookingResponse, ErrorResponse

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


async def _envelope(
    lifecycle: BookingLifecycle, booking: Booking, message: Optional[str] = None
) -> BookingEnvelope:
    flights = await lifecycle.flights_for(booking)
    return BookingEnvelope(
        message=message,
        booking=BookingResponse.from_domain(booking, flights),
    )


@router.post(
    "",
    response_model=BookingEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
)
async def create_booking(
    payload: BookingCreateRequest,
    lifecycle: BookingLifecycleDep,
    observer: BookingObserverDep,
) -> BookingEnvelope:
    booking = await lifecycle.create(
        origin=payload.origin,
        destination=payload.destination,
        pieces=payload.pieces,
        weight_kg=payload.weight_kg,
        flight_ids=payload.flightIds,
    )
    observer.booking_created(booking)

    return await _envelope(lifecycle, booking, "Booking created successfully")


@router.post(
    "/{booking_id}/depart",
    response_model=BookingEnvelope,
    responses=_ERROR_RESPONSES,
)
async def depart_booking(
    booking_id: str,
    lifecycle: BookingLifecycleDep,
    observer: BookingObserverDep,
    flight_id: Optional[int] = Query(None, alias="flightId", ge=1, le=MAX_RECORD_ID),
) -> BookingEnvelope:
    try:
        booking = await lifecycle.depart(booking_id, flight_id)
    except ConcurrencyConflict:
        increment_booking_conflict("depart")
        raise
    observer.booking_departed(booking, flight_id)

    return await _envelope(lifecycle, booking, "Booking marked as DEPARTED")


@router.post(
    "/{booking_id}/arrive",
    response_model=BookingEnvelope,
    responses=_ERROR_RESPONSES,
)
async def arrive_booking(
    booking_id: str,
    lifecycle: BookingLifecycleDep,
    observer: BookingObserverDep,
    flight_id: Optional[int] = Query(None, alias="flightId", ge=1, le=MAX_RECORD_ID),
) -> BookingEnvelope:
    try:
        booking = await lifecycle.arrive(booking_id, flight_id)
    except ConcurrencyConflict:
        increment_booking_conflict("arrive")
        raise
    observer.booking_arrived(booking, flight_id)

    return await _envelope(lifecycle, booking, "Booking marked as ARRIVED")


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingEnvelope,
    responses=_ERROR_RESPONSES,
)
async def cancel_booking(
    booking_id: str,
    lifecycle: BookingLifecycleDep,
    observer: BookingObserverDep,
) -> BookingEnvelope:
    try:
        booking = await lifecycle.cancel(booking_id)
    except ConcurrencyConflict:
        increment_booking_conflict("cancel")
        raise
    observer.booking_cancelled(booking)

    return await _envelope(lifecycle, booking, "Booking cancelled successfully")


@router.get(
    "/{booking_id}/history",
    response_model=BookingEnvelope,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_booking_history(
    booking_id: str,
    lifecycle: BookingLifecycleDep,
) -> BookingEnvelope:
    """Return the booking with its timeline in chronological order."""

    booking = await lifecycle.history(booking_id)
    return await _envelope(lifecycle, booking)


@router.get(
    "/{booking_id}",
    response_model=BookingEnvelope,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
async def get_booking(
    booking_id: str,
    lifecycle: BookingLifecycleDep,
) -> BookingEnvelope:
    booking = await lifecycle.get(booking_id)
    return await _envelope(lifecycle, booking)
