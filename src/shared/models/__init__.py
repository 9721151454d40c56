# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели для межсервисного взаимодействия.
"""

from src.shared.models.common import (
    EntityId,
    parse_entity_id,
    ErrorResponse,
    HealthStatus,
)
from src.shared.models.carpool_dto import (
    StationDTO,
    NearestStationDTO,
    RouteEstimateRequest,
    RouteOfferDTO,
    RouteCreateResponse,
    ProjectionDTO,
    RouteMatchDTO,
    DriverBookingDTO,
    RiderBookingDTO,
    BoardRequest,
)

__all__ = [
    # Common
    "EntityId",
    "parse_entity_id",
    "ErrorResponse",
    "HealthStatus",
    # Carpool
    "StationDTO",
    "NearestStationDTO",
    "RouteEstimateRequest",
    "RouteOfferDTO",
    "RouteCreateResponse",
    "ProjectionDTO",
    "RouteMatchDTO",
    "DriverBookingDTO",
    "RiderBookingDTO",
    "BoardRequest",
]
