from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from aircargo.domain.models import Booking, BookingStatus, Flight, TimelineEvent


class FlightCatalogInterface(ABC):
    """Read-only access to catalogued flights"""

    @abstractmethod
    async def find_by_route(
        self,
        origin: str,
        destination: str,
        departure_from: datetime,
        departure_to: datetime,
    ) -> List[Flight]:
        """Flights on the route departing inside the inclusive window, earliest first"""
        ...

    @abstractmethod
    async def find_departures(
        self,
        origin: str,
        departure_from: datetime,
        departure_to: datetime,
        exclude_destination: Optional[str] = None,
    ) -> List[Flight]:
        """Flights leaving origin inside the window, earliest first"""
        ...

    @abstractmethod
    async def get(self, flight_id: int) -> Optional[Flight]:
        ...

    @abstractmethod
    async def exists(self, flight_id: int) -> bool:
        ...


class BookingStoreInterface(ABC):
    """Persistence contract for bookings.

    ``conditional_update`` is the only way a stored status changes. It must
    compare and swap atomically: the new status and timeline event are written
    only if the stored status is still one of ``expected_statuses`` at write
    time, otherwise nothing is written and ``None`` is returned.
    """

    @abstractmethod
    async def insert(self, booking: Booking) -> Booking:
        """Persist a new booking, raising DuplicateRefId on a ref_id collision"""
        ...

    @abstractmethod
    async def conditional_update(
        self,
        booking_id: int,
        expected_statuses: Iterable[BookingStatus],
        new_status: BookingStatus,
        event: TimelineEvent,
    ) -> Optional[Booking]:
        ...

    @abstractmethod
    async def find_by_id(self, booking_id: int) -> Optional[Booking]:
        ...

    @abstractmethod
    async def find_by_ref_id(self, ref_id: str) -> Optional[Booking]:
        ...

    @abstractmethod
    async def latest_ref_id(self, prefix: str) -> Optional[str]:
        """Lexicographically greatest ref_id starting with prefix"""
        ...
