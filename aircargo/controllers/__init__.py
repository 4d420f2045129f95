"""FastAPI routers acting as controllers in the MVC architecture."""

from . import bookings, routes

__all__ = ["bookings", "routes"]
