# src/core/bookings/__init__.py
"""
Бронирования мест в предложениях маршрутов.
"""

from src.core.bookings.models import Booking, BookingCreate, BookingRequestDTO
from src.core.bookings.repository import BookingRepository
from src.core.bookings.state_machine import BookingStateMachine
from src.core.bookings.service import BookingService, make_pin_generator

__all__ = [
    "Booking",
    "BookingCreate",
    "BookingRequestDTO",
    "BookingRepository",
    "BookingStateMachine",
    "BookingService",
    "make_pin_generator",
]
