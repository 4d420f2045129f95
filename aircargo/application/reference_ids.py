"""Date-scoped sequential booking reference allocation."""

from __future__ import annotations

from datetime import datetime

from aircargo.application.interfaces import BookingStoreInterface
from aircargo.domain.services import RefIdService


class RefIdAllocator:
    """Allocate ``BOOK-YYYYMMDD-NNNNNN`` references from the store's current maximum.

    The read-max, increment and insert steps are not atomic. Two creations on
    the same day may compute the same reference; the store's unique constraint
    turns the loser's insert into ``DuplicateRefId``.
    """

    def __init__(
        self,
        store: BookingStoreInterface,
        prefix: str = "BOOK",
        width: int = 6,
    ) -> None:
        self.store = store
        self.prefix = prefix
        self.width = width

    async def allocate(self, created_at: datetime) -> str:
        day_prefix = RefIdService.prefix_for(created_at, self.prefix)
        latest = await self.store.latest_ref_id(day_prefix)

        sequence = 1
        if latest:
            last_sequence = RefIdService.parse_sequence(latest, day_prefix)
            if last_sequence is not None:
                sequence = last_sequence + 1

        return RefIdService.compose(day_prefix, sequence, self.width)


__all__ = ["RefIdAllocator"]
