# src/core/__init__.py
"""
Доменный слой (Core Domain).
Геометрия маршрутов, тарификация, матчинг и бронирования.
"""

from src.core.stations import Station, StationService
from src.core.routes import RouteOffer, RouteService
from src.core.bookings import Booking, BookingService
from src.core.matching import RouteMatcher
from src.core.pricing import SegmentPricer

__all__ = [
    "Station",
    "StationService",
    "RouteOffer",
    "RouteService",
    "Booking",
    "BookingService",
    "RouteMatcher",
    "SegmentPricer",
]
