# src/core/routes/__init__.py
"""
Предложения маршрутов водителей.
"""

from src.core.routes.models import (
    RouteOffer,
    RouteCreateDTO,
    RouteEstimate,
    RouteSearchDTO,
)
from src.core.routes.repository import RouteOfferRepository
from src.core.routes.service import RouteService, CreatedRoute

__all__ = [
    "RouteOffer",
    "RouteCreateDTO",
    "RouteEstimate",
    "RouteSearchDTO",
    "RouteOfferRepository",
    "RouteService",
    "CreatedRoute",
]
