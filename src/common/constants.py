# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RouteOfferStatus(str, Enum):
    """Статусы предложения маршрута."""
    DRAFT = "draft"
    PUBLISHED = "published"

    def __str__(self) -> str:
        return self.value


class PickupMode(str, Enum):
    """Режим посадки пассажиров."""
    STATIONS = "stations"
    FLEXIBLE = "flexible"

    def __str__(self) -> str:
        return self.value


class BookingStatus(str, Enum):
    """Статусы бронирования."""
    REQUESTED = "requested"
    OFFERED = "offered"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BOARDED = "boarded"
    DROPPED = "dropped"

    def __str__(self) -> str:
        return self.value
