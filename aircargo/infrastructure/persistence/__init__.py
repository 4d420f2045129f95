"""Storage adapters implementing the application interfaces."""

from .memory import InMemoryBookingStore, InMemoryFlightCatalog
from .repositories_sqlalchemy import SQLAlchemyBookingStore, SQLAlchemyFlightCatalog

__all__ = [
    "InMemoryBookingStore",
    "InMemoryFlightCatalog",
    "SQLAlchemyBookingStore",
    "SQLAlchemyFlightCatalog",
]
