import asyncio
from datetime import datetime, timedelta, timezone

from aircargo.application.reference_ids import RefIdAllocator
from aircargo.domain.services import RefIdService
from aircargo.infrastructure.persistence import InMemoryBookingStore

from conftest import utc


class FixedLatestStore(InMemoryBookingStore):
    def __init__(self, latest):
        super().__init__()
        self.latest = latest
        self.prefixes = []

    async def latest_ref_id(self, prefix):
        self.prefixes.append(prefix)
        return self.latest


def test_first_reference_of_the_day():
    allocator = RefIdAllocator(FixedLatestStore(None))

    assert asyncio.run(allocator.allocate(utc(2024, 5, 10, 6))) == "BOOK-20240510-000001"


def test_reference_increments_latest_sequence():
    store = FixedLatestStore("BOOK-20240510-000041")
    allocator = RefIdAllocator(store)

    assert asyncio.run(allocator.allocate(utc(2024, 5, 10, 23, 59))) == "BOOK-20240510-000042"
    assert store.prefixes == ["BOOK-20240510-"]


def test_unparseable_latest_restarts_sequence():
    allocator = RefIdAllocator(FixedLatestStore("BOOK-20240510-legacy"))

    assert asyncio.run(allocator.allocate(utc(2024, 5, 10, 6))) == "BOOK-20240510-000001"


def test_date_component_uses_utc():
    offset = timezone(timedelta(hours=5, minutes=30))
    created_at = datetime(2024, 5, 11, 2, 0, tzinfo=offset)

    assert RefIdService.prefix_for(created_at) == "BOOK-20240510-"


def test_custom_prefix_and_width():
    allocator = RefIdAllocator(FixedLatestStore("CRG-20240510-0009"), prefix="CRG", width=4)

    assert asyncio.run(allocator.allocate(utc(2024, 5, 10, 6))) == "CRG-20240510-0010"


def test_sequence_beyond_width_keeps_growing():
    assert RefIdService.compose("BOOK-20240510-", 1234567) == "BOOK-20240510-1234567"


def test_parse_sequence_requires_matching_day():
    assert RefIdService.parse_sequence("BOOK-20240509-000007", "BOOK-20240510-") is None
    assert RefIdService.parse_sequence("BOOK-20240510-000007", "BOOK-20240510-") == 7


def test_in_memory_store_latest_reference_is_scoped_to_prefix():
    store = InMemoryBookingStore()
    store._ref_index.update(
        {
            "BOOK-20240509-000099": 1,
            "BOOK-20240510-000002": 2,
            "BOOK-20240510-000010": 3,
        }
    )

    assert asyncio.run(store.latest_ref_id("BOOK-20240510-")) == "BOOK-20240510-000010"
    assert asyncio.run(store.latest_ref_id("BOOK-20240511-")) is None
