#!/usr/bin/env python3
"""
Run script for the Air Cargo Booking & Tracking backend
"""
import uvicorn

from aircargo.config.settings import settings
from aircargo.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
