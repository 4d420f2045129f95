import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Sequence

from .models import BookingStatus, TimelineEvent

END_OF_DAY = time(23, 59, 59, 999000)

# Surrogate keys are 32-bit integer columns.
MAX_RECORD_ID = 2**31 - 1


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_record_id(value: int) -> bool:
    return 1 <= value <= MAX_RECORD_ID


class BookingStateMachine:
    """Transition table for the booking lifecycle"""

    INITIAL = BookingStatus.BOOKED
    TRANSITIONS = {
        BookingStatus.BOOKED: frozenset(
            {BookingStatus.DEPARTED, BookingStatus.ARRIVED, BookingStatus.CANCELLED}
        ),
        BookingStatus.DEPARTED: frozenset(
            {BookingStatus.ARRIVED, BookingStatus.CANCELLED}
        ),
        BookingStatus.ARRIVED: frozenset(),
        BookingStatus.DELIVERED: frozenset(),
        BookingStatus.CANCELLED: frozenset(),
    }

    @classmethod
    def is_allowed(cls, current: BookingStatus, target: BookingStatus) -> bool:
        return target in cls.TRANSITIONS.get(current, frozenset())

    @staticmethod
    def should_record(timeline: Sequence[TimelineEvent], status: BookingStatus) -> bool:
        """A status is appended unless it is already the last recorded event"""
        return not timeline or timeline[-1].event != status


class FlightDomainService:
    """Domain helpers shared by flight queries and route search"""

    @staticmethod
    def normalize_airport_code(code: str) -> str:
        return code.strip().upper()

    @staticmethod
    def duration_minutes(start: datetime, end: datetime) -> int:
        """Whole minutes between two instants, rounding half up"""
        seconds = (as_utc(end) - as_utc(start)).total_seconds()
        return math.floor(seconds / 60 + 0.5)

    @staticmethod
    def day_window(day: date) -> tuple[datetime, datetime]:
        """Return the first and last millisecond of the given UTC calendar day"""
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        end = datetime.combine(day, END_OF_DAY, tzinfo=timezone.utc)
        return start, end

    @staticmethod
    def end_of_next_day(moment: datetime) -> datetime:
        next_day = as_utc(moment).date() + timedelta(days=1)
        return datetime.combine(next_day, END_OF_DAY, tzinfo=timezone.utc)


class RefIdService:
    """Formatting rules for human readable booking references"""

    @staticmethod
    def prefix_for(created_at: datetime, prefix: str = "BOOK") -> str:
        return f"{prefix}-{as_utc(created_at):%Y%m%d}-"

    @staticmethod
    def compose(day_prefix: str, sequence: int, width: int = 6) -> str:
        return f"{day_prefix}{sequence:0{width}d}"

    @staticmethod
    def parse_sequence(ref_id: str, day_prefix: str) -> Optional[int]:
        if not ref_id.startswith(day_prefix):
            return None
        suffix = ref_id[len(day_prefix):]
        if not suffix.isdigit():
            return None
        return int(suffix)
