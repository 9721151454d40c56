# src/common/__init__.py
"""
Общие утилиты, константы, доменные ошибки и логгер.
"""

from src.common.logger import get_logger, log_info, log_error, log_warning, log_debug
from src.common.constants import TypeMsg, BookingStatus, RouteOfferStatus, PickupMode
from src.common.exceptions import CarpoolError

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "TypeMsg",
    "BookingStatus",
    "RouteOfferStatus",
    "PickupMode",
    "CarpoolError",
]
