"""Shared fixtures for the booking lifecycle and route search tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from aircargo.application.use_cases import BookingLifecycle  # noqa: E402
from aircargo.domain.models import Flight  # noqa: E402
from aircargo.infrastructure.persistence import (  # noqa: E402
    InMemoryBookingStore,
    InMemoryFlightCatalog,
)

BASE_TIME = datetime(2024, 5, 10, 6, 0, tzinfo=timezone.utc)


class SteppingClock:
    """Deterministic clock advancing one minute per reading."""

    def __init__(self, start: datetime = BASE_TIME, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


def utc(year: int, month: int, day: int, hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


def make_flight(
    number: str,
    origin: str,
    destination: str,
    departure: datetime,
    arrival: datetime,
    airline: str = "Air India",
) -> Flight:
    return Flight(
        flight_number=number,
        airline_name=airline,
        origin=origin,
        destination=destination,
        departure_time=departure,
        arrival_time=arrival,
    )


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def catalog() -> InMemoryFlightCatalog:
    catalog = InMemoryFlightCatalog()
    catalog.add(make_flight("AI101", "DEL", "BOM", utc(2024, 5, 10, 10), utc(2024, 5, 10, 12, 30)))
    catalog.add(make_flight("SG301", "DEL", "HYD", utc(2024, 5, 10, 8), utc(2024, 5, 10, 10, 30)))
    return catalog


@pytest.fixture
def store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def lifecycle(store, catalog, clock) -> BookingLifecycle:
    return BookingLifecycle(store, catalog, clock=clock)
