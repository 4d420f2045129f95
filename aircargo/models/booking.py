"""SQLAlchemy models for cargo bookings and their status timeline."""

from __future__ import annotations


from sqlalchemy import JSON, Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from aircargo.domain.models import BookingStatus
from aircargo.models.base import Base


def _status_column_type() -> SqlEnum:
    return SqlEnum(
        BookingStatus,
        name="booking_status",
        values_callable=lambda members: [member.value for member in members],
    )


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    ref_id = Column(String(32), unique=True, nullable=False, index=True)
    origin = Column(String(8), nullable=False, index=True)
    destination = Column(String(8), nullable=False, index=True)
    pieces = Column(Integer, nullable=False)
    weight_kg = Column(Integer, nullable=False)
    status = Column(
        _status_column_type(),
        nullable=False,
        default=BookingStatus.BOOKED,
        index=True,
    )
    flight_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    events = relationship(
        "BookingEvent",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingEvent.id",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_bookings_status_created", "status", "created_at"),
        Index("ix_bookings_route_created", "origin", "destination", "created_at"),
    )


class BookingEvent(Base):
    """One append-only timeline entry."""

    __tablename__ = "booking_events"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event = Column(_status_column_type(), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    flight_id = Column(Integer, nullable=True)

    booking = relationship("Booking", back_populates="events")


__all__ = ["Booking", "BookingEvent", "BookingStatus"]
