"""Pydantic schemas for route search responses."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal

from pydantic import BaseModel, Field

from aircargo.domain.models import DirectRoute, Flight, RouteSearchResult, TransitRoute
from aircargo.views.common import SuccessResponse


class FlightResponse(BaseModel):
    id: int
    flightNumber: str
    airlineName: str
    origin: str
    destination: str
    departureDateTime: datetime
    arrivalDateTime: datetime

    @classmethod
    def from_domain(cls, flight: Flight) -> "FlightResponse":
        return cls(
            id=flight.id,
            flightNumber=flight.flight_number,
            airlineName=flight.airline_name,
            origin=flight.origin,
            destination=flight.destination,
            departureDateTime=flight.departure_time,
            arrivalDateTime=flight.arrival_time,
        )


class DirectRouteResponse(BaseModel):
    type: Literal["direct"] = "direct"
    flight: FlightResponse
    totalDuration: int = Field(..., description="Minutes from departure to arrival")

    @classmethod
    def from_domain(cls, route: DirectRoute) -> "DirectRouteResponse":
        return cls(
            flight=FlightResponse.from_domain(route.flight),
            totalDuration=route.total_duration,
        )


class TransitRouteResponse(BaseModel):
    type: Literal["transit"] = "transit"
    firstLeg: FlightResponse
    secondLeg: FlightResponse
    transitCity: str
    layoverDuration: int = Field(..., description="Minutes spent at the transit airport")
    totalDuration: int = Field(..., description="Minutes from first departure to final arrival")

    @classmethod
    def from_domain(cls, route: TransitRoute) -> "TransitRouteResponse":
        return cls(
            firstLeg=FlightResponse.from_domain(route.first_leg),
            secondLeg=FlightResponse.from_domain(route.second_leg),
            transitCity=route.transit_city,
            layoverDuration=route.layover_duration,
            totalDuration=route.total_duration,
        )


class RoutesPayload(BaseModel):
    direct: List[DirectRouteResponse]
    transit: List[TransitRouteResponse]


class RouteSummary(BaseModel):
    directFlights: int
    transitRoutes: int
    totalOptions: int


class RouteSearchResponse(SuccessResponse):
    origin: str
    destination: str
    departureDate: date
    routes: RoutesPayload
    summary: RouteSummary

    @classmethod
    def from_domain(
        cls,
        origin: str,
        destination: str,
        departure_date: date,
        result: RouteSearchResult,
    ) -> "RouteSearchResponse":
        return cls(
            origin=origin.strip().upper(),
            destination=destination.strip().upper(),
            departureDate=departure_date,
            routes=RoutesPayload(
                direct=[DirectRouteResponse.from_domain(route) for route in result.direct],
                transit=[TransitRouteResponse.from_domain(route) for route in result.transit],
            ),
            summary=RouteSummary(
                directFlights=len(result.direct),
                transitRoutes=len(result.transit),
                totalOptions=len(result.direct) + len(result.transit),
            ),
        )
