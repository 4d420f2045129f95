"""HTTP-level tests for the booking and route endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from aircargo.application.use_cases import BookingLifecycle, RouteFinder
from aircargo.controllers.dependencies import (
    get_booking_lifecycle,
    get_booking_observer,
    get_route_finder,
)
from aircargo.infrastructure.persistence import InMemoryBookingStore
from aircargo.main import app

from conftest import SteppingClock, make_flight, utc


class RecordingObserver:
    def __init__(self):
        self.events = []

    def booking_created(self, booking):
        self.events.append(("created", booking.ref_id))

    def booking_departed(self, booking, flight_id=None):
        self.events.append(("departed", booking.ref_id, flight_id))

    def booking_arrived(self, booking, flight_id=None):
        self.events.append(("arrived", booking.ref_id, flight_id))

    def booking_cancelled(self, booking):
        self.events.append(("cancelled", booking.ref_id))


class ConflictingStore(InMemoryBookingStore):
    async def conditional_update(self, booking_id, expected_statuses, new_status, event):
        return None


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def client(catalog, store, observer):
    """Test client wired to in-memory stores instead of the database."""

    catalog.add(make_flight("SG302", "HYD", "BLR", utc(2024, 5, 10, 14), utc(2024, 5, 10, 15, 30)))
    lifecycle = BookingLifecycle(store, catalog, clock=SteppingClock())

    app.dependency_overrides[get_booking_lifecycle] = lambda: lifecycle
    app.dependency_overrides[get_route_finder] = lambda: RouteFinder(catalog)
    app.dependency_overrides[get_booking_observer] = lambda: observer

    yield TestClient(app)

    app.dependency_overrides.clear()


def _create(client, **overrides):
    payload = {"origin": "del", "destination": "bom", "pieces": 3, "weight_kg": 75, "flightIds": [1]}
    payload.update(overrides)
    return client.post("/api/bookings", json=payload)


def test_create_booking(client, observer):
    response = _create(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Booking created successfully"
    booking = body["booking"]
    assert booking["ref_id"] == "BOOK-20240510-000001"
    assert booking["origin"] == "DEL"
    assert booking["status"] == "BOOKED"
    assert [flight["id"] for flight in booking["flightIds"]] == [1]
    assert booking["flightIds"][0]["flightNumber"] == "AI101"
    assert booking["flightIds"][0]["destination"] == "BOM"
    assert [entry["event"] for entry in booking["timeline"]] == ["BOOKED"]
    assert observer.events == [("created", "BOOK-20240510-000001")]


def test_create_booking_rejects_zero_pieces(client, observer):
    response = _create(client, pieces=0)

    assert response.status_code == 422
    assert observer.events == []


def test_create_booking_with_unknown_flight(client):
    response = _create(client, flightIds=[1, 77])

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_flight_reference"
    assert "77" in response.json()["detail"]


def test_depart_and_arrive(client, observer):
    ref_id = _create(client).json()["booking"]["ref_id"]

    departed = client.post(f"/api/bookings/{ref_id}/depart", params={"flightId": 1})
    arrived = client.post(f"/api/bookings/{ref_id.lower()}/arrive")

    assert departed.status_code == 200
    assert departed.json()["message"] == "Booking marked as DEPARTED"
    assert arrived.status_code == 200
    assert arrived.json()["booking"]["status"] == "ARRIVED"
    assert observer.events[1:] == [
        ("departed", ref_id, 1),
        ("arrived", ref_id, None),
    ]

    history = client.get(f"/api/bookings/{ref_id}/history").json()["booking"]
    assert [entry["event"] for entry in history["timeline"]] == ["BOOKED", "DEPARTED", "ARRIVED"]
    assert history["timeline"][1]["flightId"] == 1


def test_cancel_after_arrival_is_rejected(client):
    booking_id = _create(client).json()["booking"]["id"]
    client.post(f"/api/bookings/{booking_id}/arrive")

    response = client.post(f"/api/bookings/{booking_id}/cancel")

    assert response.status_code == 400
    assert response.json() == {
        "detail": "Cannot cancel booking that has already ARRIVED",
        "code": "invalid_transition",
    }


def test_cancel_booking(client, observer):
    ref_id = _create(client).json()["booking"]["ref_id"]

    response = client.post(f"/api/bookings/{ref_id}/cancel")

    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "CANCELLED"
    assert observer.events[-1] == ("cancelled", ref_id)


def test_unknown_booking_returns_404(client):
    response = client.get("/api/bookings/BOOK-20240510-000999")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_oversized_numeric_identifier_returns_404(client):
    _create(client)

    response = client.get("/api/bookings/99999999999")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_oversized_flight_ids_are_rejected(client):
    ref_id = _create(client).json()["booking"]["ref_id"]

    created = _create(client, flightIds=[2**31])
    departed = client.post(f"/api/bookings/{ref_id}/depart", params={"flightId": 2**31})

    assert created.status_code == 400
    assert created.json()["code"] == "invalid_flight_reference"
    assert departed.status_code == 422


def test_lost_race_returns_409(catalog, observer):
    lifecycle = BookingLifecycle(ConflictingStore(), catalog, clock=SteppingClock())
    app.dependency_overrides[get_booking_lifecycle] = lambda: lifecycle
    app.dependency_overrides[get_booking_observer] = lambda: observer
    try:
        client = TestClient(app)
        ref_id = _create(client).json()["booking"]["ref_id"]

        response = client.post(f"/api/bookings/{ref_id}/cancel")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 409
    assert response.json()["code"] == "concurrency_conflict"
    assert observer.events == [("created", ref_id)]


def test_route_search(client):
    response = client.get(
        "/api/routes",
        params={"origin": "del", "destination": "BLR", "departure_date": "2024-05-10"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["origin"] == "DEL"
    assert body["summary"] == {"directFlights": 0, "transitRoutes": 1, "totalOptions": 1}
    transit = body["routes"]["transit"][0]
    assert transit["type"] == "transit"
    assert transit["transitCity"] == "HYD"
    assert transit["firstLeg"]["flightNumber"] == "SG301"
    assert transit["layoverDuration"] == 210
    assert transit["totalDuration"] == 450


@pytest.mark.parametrize("departure_date", ["2024-13-40", "10-05-2024"])
def test_route_search_rejects_bad_dates(client, departure_date):
    response = client.get(
        "/api/routes",
        params={"origin": "DEL", "destination": "BLR", "departure_date": departure_date},
    )

    assert response.status_code == 422


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
