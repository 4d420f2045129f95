"""Seed the flight catalog and a handful of bookings for manual testing.

Usage: python scripts/seed_flights.py [--reset] [--days 7] [--seed 42]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import random
import sys
from datetime import datetime, time, timedelta, timezone

sys.path.append(os.getcwd())

from sqlalchemy import delete  # noqa: E402

from aircargo.application.use_cases import BookingLifecycle  # noqa: E402
from aircargo.database import dispose_engine, init_models, session_scope  # noqa: E402
from aircargo.infrastructure.persistence import (  # noqa: E402
    SQLAlchemyBookingStore,
    SQLAlchemyFlightCatalog,
)
from aircargo.models import Booking, BookingEvent, Flight  # noqa: E402

logger = logging.getLogger("seed_flights")

AIRLINES = [
    "Air India",
    "IndiGo",
    "SpiceJet",
    "Vistara",
    "Go First",
    "AirAsia India",
]

DIRECT_ROUTES = [
    ("DEL", "BOM"), ("BOM", "BLR"), ("DEL", "BLR"), ("BOM", "HYD"),
    ("HYD", "BLR"), ("DEL", "HYD"), ("DEL", "CCU"), ("BOM", "CCU"),
    ("BLR", "MAA"), ("HYD", "MAA"), ("DEL", "AMD"), ("BOM", "AMD"),
    ("BLR", "COK"), ("HYD", "PNQ"), ("BOM", "GOI"), ("DEL", "MAA"),
    ("CCU", "HYD"), ("AMD", "BLR"),
]

# Feeder legs into HYD and onward legs out of it, for one-stop itineraries.
TRANSIT_FIRST_LEGS = [("DEL", "HYD"), ("BOM", "HYD"), ("CCU", "HYD"), ("AMD", "HYD")]
TRANSIT_SECOND_LEGS = [("HYD", "BLR"), ("HYD", "MAA"), ("HYD", "COK"), ("HYD", "PNQ")]


def _at(day, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def generate_flights(start_day, days: int, rng: random.Random) -> list[Flight]:
    flights: list[Flight] = []
    counter = 100

    def add(prefix: str, airline: str, origin: str, destination: str, departure: datetime, hours: int) -> None:
        nonlocal counter
        flights.append(
            Flight(
                flight_number=f"{prefix}{counter}",
                airline_name=airline,
                origin=origin,
                destination=destination,
                departure_time=departure,
                arrival_time=departure + timedelta(hours=hours),
            )
        )
        counter += 1

    for offset in range(days):
        day = start_day + timedelta(days=offset)
        for index, (origin, destination) in enumerate(DIRECT_ROUTES):
            add("AI", AIRLINES[index % len(AIRLINES)], origin, destination,
                _at(day, 8 + index % 4, 30), 2 + rng.randint(0, 1))
            add("IG", AIRLINES[(index + 1) % len(AIRLINES)], origin, destination,
                _at(day, 14 + index % 3), 2 + rng.randint(0, 1))

        for origin, transit_city in TRANSIT_FIRST_LEGS:
            add("SG", rng.choice(AIRLINES), origin, transit_city,
                _at(day, 10 + rng.randint(0, 3)), 1 + rng.randint(0, 1))

        for transit_city, destination in TRANSIT_SECOND_LEGS:
            add("VT", rng.choice(AIRLINES), transit_city, destination,
                _at(day, 14 + rng.randint(0, 5), 30), 1 + rng.randint(0, 1))
            add("GA", rng.choice(AIRLINES), transit_city, destination,
                _at(day + timedelta(days=1), 8 + rng.randint(0, 3)), 1 + rng.randint(0, 1))

    return flights


async def seed(reset: bool, days: int, seed_value: int) -> None:
    await init_models()
    rng = random.Random(seed_value)
    today = datetime.now(timezone.utc).date()

    async with session_scope() as session:
        if reset:
            await session.execute(delete(BookingEvent))
            await session.execute(delete(Booking))
            await session.execute(delete(Flight))
            await session.commit()
            logger.info("Existing flights and bookings cleared")

        flights = generate_flights(today, days, rng)
        session.add_all(flights)
        await session.commit()
        logger.info("Inserted %d flights", len(flights))

        lifecycle = BookingLifecycle(
            SQLAlchemyBookingStore(session),
            SQLAlchemyFlightCatalog(session),
        )
        samples = [flights[index] for index in (0, 3, 6, 9, 12)]
        created = []
        for flight in samples:
            booking = await lifecycle.create(
                origin=flight.origin,
                destination=flight.destination,
                pieces=rng.randint(1, 20),
                weight_kg=rng.randint(50, 1500),
                flight_ids=[flight.id],
            )
            created.append((booking, flight))

        await lifecycle.depart(created[1][0].ref_id, created[1][1].id)
        await lifecycle.depart(created[2][0].ref_id, created[2][1].id)
        await lifecycle.arrive(created[2][0].ref_id, created[2][1].id)
        await lifecycle.cancel(created[3][0].ref_id)
        logger.info("Created %d sample bookings", len(created))

    await dispose_engine()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed flights and sample bookings")
    parser.add_argument("--reset", action="store_true", help="delete existing data first")
    parser.add_argument("--days", type=int, default=7, help="number of days to generate")
    parser.add_argument("--seed", type=int, default=42, help="random seed")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
    asyncio.run(seed(args.reset, args.days, args.seed))


if __name__ == "__main__":
    main()
