"""Pydantic schemas for booking interactions."""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from aircargo.domain.models import Booking, BookingStatus, Flight, TimelineEvent
from aircargo.views.common import SuccessResponse
from aircargo.views.routes import FlightResponse

_AIRPORT_CODE_PATTERN = re.compile(r"^[A-Z0-9]{3,8}$")


class BookingCreateRequest(BaseModel):
    """Request model for creating a cargo booking."""

    origin: str = Field(..., min_length=1, max_length=8)
    destination: str = Field(..., min_length=1, max_length=8)
    pieces: int = Field(..., ge=1)
    weight_kg: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("weight_kg", "weightKg"),
    )
    flightIds: List[int] = Field(
        default_factory=list,
        validation_alias=AliasChoices("flightIds", "flight_ids"),
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("origin", "destination")
    @classmethod
    def validate_airport_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not _AIRPORT_CODE_PATTERN.match(code):
            raise ValueError("Airport codes must be 3-8 letters or digits")
        return code


class TimelineEventResponse(BaseModel):
    event: BookingStatus
    timestamp: datetime
    flightId: Optional[int] = None

    @classmethod
    def from_domain(cls, event: TimelineEvent) -> "TimelineEventResponse":
        return cls(event=event.event, timestamp=event.timestamp, flightId=event.flight_id)


class BookingResponse(BaseModel):
    """Booking representation returned by every booking endpoint."""

    id: int
    ref_id: str
    origin: str
    destination: str
    pieces: int
    weight_kg: int
    status: BookingStatus
    flightIds: List[FlightResponse] = Field(
        default_factory=list,
        description="Catalogued flights the booking travels on",
    )
    timeline: List[TimelineEventResponse]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_domain(cls, booking: Booking, flights: Sequence[Flight] = ()) -> "BookingResponse":
        return cls(
            id=booking.id,
            ref_id=booking.ref_id,
            origin=booking.origin,
            destination=booking.destination,
            pieces=booking.pieces,
            weight_kg=booking.weight_kg,
            status=booking.status,
            flightIds=[FlightResponse.from_domain(flight) for flight in flights],
            timeline=[TimelineEventResponse.from_domain(event) for event in booking.timeline],
            createdAt=booking.created_at,
            updatedAt=booking.updated_at,
        )


class BookingEnvelope(SuccessResponse):
    booking: BookingResponse
