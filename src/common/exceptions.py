# src/common/exceptions.py
"""
Доменные ошибки карпул-сервиса.

Каждая ошибка несёт код и HTTP-статус, которые слой контроллеров
переводит в ответ. Ядро не делает ретраев.
"""

from __future__ import annotations

from typing import Any


class CarpoolError(Exception):
    """Базовая доменная ошибка."""

    error_code: str = "carpool_error"
    status_code: int = 400

    def __init__(self, message: str = "", **details: Any) -> None:
        super().__init__(message or self.error_code)
        self.message = message or self.error_code
        self.details = details


class InvalidSegmentOrderError(CarpoolError):
    """Посадка проецируется не раньше высадки вдоль маршрута."""

    error_code = "invalid_segment_order"
    status_code = 400


class InsufficientCapacityError(CarpoolError):
    """Недостаточно свободных мест в предложении маршрута."""

    error_code = "insufficient_capacity"
    status_code = 409


class InvalidStateTransitionError(CarpoolError):
    """Переход запрещён из текущего статуса."""

    error_code = "invalid_state_transition"
    status_code = 400


class InvalidPinError(CarpoolError):
    """PIN-код посадки не совпал."""

    error_code = "invalid_pin"
    status_code = 400


class MalformedPolylineError(CarpoolError):
    """Сохранённая геометрия маршрута не разбирается."""

    error_code = "malformed_polyline"
    status_code = 422


class StationNotFoundError(CarpoolError):
    error_code = "station_not_found"
    status_code = 404


class RouteOfferNotFoundError(CarpoolError):
    error_code = "route_offer_not_found"
    status_code = 404


class BookingNotFoundError(CarpoolError):
    error_code = "booking_not_found"
    status_code = 404
