from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class BookingStatus(str, Enum):
    BOOKED = "BOOKED"
    DEPARTED = "DEPARTED"
    ARRIVED = "ARRIVED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class Flight(BaseModel):
    """Domain model for a catalogued flight"""
    id: Optional[int] = None
    flight_number: str
    airline_name: str
    origin: str
    destination: str
    departure_time: datetime
    arrival_time: datetime

    class Config:
        from_attributes = True


class TimelineEvent(BaseModel):
    """A single status change recorded on a booking"""
    event: BookingStatus
    timestamp: datetime
    flight_id: Optional[int] = None

    class Config:
        from_attributes = True


class Booking(BaseModel):
    """Domain model for a cargo booking"""
    id: Optional[int] = None
    ref_id: str
    origin: str
    destination: str
    pieces: int
    weight_kg: int
    status: BookingStatus = BookingStatus.BOOKED
    flight_ids: List[int] = Field(default_factory=list)
    timeline: List[TimelineEvent] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DirectRoute(BaseModel):
    """A single flight serving the requested origin and destination"""
    flight: Flight
    total_duration: int


class TransitRoute(BaseModel):
    """Two legs joined at an intermediate airport"""
    first_leg: Flight
    second_leg: Flight
    transit_city: str
    layover_duration: int
    total_duration: int


class RouteSearchResult(BaseModel):
    direct: List[DirectRoute] = Field(default_factory=list)
    transit: List[TransitRoute] = Field(default_factory=list)
