from datetime import date
from typing import List

from aircargo.application.interfaces import FlightCatalogInterface
from aircargo.domain.errors import BookingValidationError
from aircargo.domain.models import DirectRoute, Flight, RouteSearchResult, TransitRoute
from aircargo.domain.services import FlightDomainService


class RouteFinder:
    """Direct and one-stop itineraries between two airports on a given day.

    A second leg must leave the transit airport no earlier than the first
    leg lands there and no later than the end of the following calendar day.
    Every call queries the catalog afresh; nothing is cached.
    """

    def __init__(self, flight_catalog: FlightCatalogInterface):
        self.flight_catalog = flight_catalog

    async def find_routes(
        self, origin: str, destination: str, departure_date: date
    ) -> RouteSearchResult:
        if not origin or not origin.strip() or not destination or not destination.strip():
            raise BookingValidationError("origin and destination are required")

        origin = FlightDomainService.normalize_airport_code(origin)
        destination = FlightDomainService.normalize_airport_code(destination)
        day_start, day_end = FlightDomainService.day_window(departure_date)

        direct = await self._direct_routes(origin, destination, day_start, day_end)
        transit = await self._transit_routes(origin, destination, day_start, day_end)
        return RouteSearchResult(direct=direct, transit=transit)

    async def _direct_routes(self, origin, destination, day_start, day_end) -> List[DirectRoute]:
        flights = await self.flight_catalog.find_by_route(
            origin, destination, day_start, day_end
        )
        return [
            DirectRoute(
                flight=flight,
                total_duration=FlightDomainService.duration_minutes(
                    flight.departure_time, flight.arrival_time
                ),
            )
            for flight in flights
        ]

    async def _transit_routes(self, origin, destination, day_start, day_end) -> List[TransitRoute]:
        # Legs landing at the final destination are direct routes, not transits.
        first_legs = await self.flight_catalog.find_departures(
            origin, day_start, day_end, exclude_destination=destination
        )
        if not first_legs:
            return []

        routes: List[TransitRoute] = []
        for first_leg in first_legs:
            second_legs = await self.flight_catalog.find_by_route(
                first_leg.destination,
                destination,
                first_leg.arrival_time,
                FlightDomainService.end_of_next_day(first_leg.arrival_time),
            )
            routes.extend(self._combine(first_leg, second_leg) for second_leg in second_legs)

        # Ties keep discovery order.
        return sorted(routes, key=lambda route: route.total_duration)

    @staticmethod
    def _combine(first_leg: Flight, second_leg: Flight) -> TransitRoute:
        return TransitRoute(
            first_leg=first_leg,
            second_leg=second_leg,
            transit_city=first_leg.destination,
            layover_duration=FlightDomainService.duration_minutes(
                first_leg.arrival_time, second_leg.departure_time
            ),
            total_duration=FlightDomainService.duration_minutes(
                first_leg.departure_time, second_leg.arrival_time
            ),
        )
