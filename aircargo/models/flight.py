"""SQLAlchemy model for catalogued flights."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, String

from aircargo.models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Flight(Base):
    __tablename__ = "flights"

    id = Column(Integer, primary_key=True, index=True)
    flight_number = Column(String(16), nullable=False, index=True)
    airline_name = Column(String(100), nullable=False, index=True)
    origin = Column(String(8), nullable=False)
    destination = Column(String(8), nullable=False)
    departure_time = Column(DateTime(timezone=True), nullable=False)
    arrival_time = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        # Route search filters on origin + destination + departure window.
        Index("ix_flights_route_departure", "origin", "destination", "departure_time"),
        Index("ix_flights_origin_departure", "origin", "departure_time"),
    )


__all__ = ["Flight"]
