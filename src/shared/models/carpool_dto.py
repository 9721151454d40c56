# src/shared/models/carpool_dto.py
"""
DTO HTTP-слоя карпул-сервиса.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, Field

from src.common.constants import BookingStatus, PickupMode, RouteOfferStatus
from src.shared.models.common import EntityId

if TYPE_CHECKING:
    from src.core.bookings import Booking
    from src.core.geo import Projection
    from src.core.matching import RouteMatch
    from src.core.routes import CreatedRoute, RouteOffer
    from src.core.stations import Station


class StationDTO(BaseModel):
    """Станция."""

    id: str
    name: str
    city: Optional[str] = None
    lat: float
    lng: float

    @classmethod
    def from_station(cls, station: Station) -> StationDTO:
        return cls(
            id=station.id,
            name=station.name,
            city=station.city,
            lat=station.latitude,
            lng=station.longitude,
        )


class NearestStationDTO(BaseModel):
    """Ближайшая станция и расстояние до неё."""

    station: StationDTO
    distance_meters: float


class RouteEstimateRequest(BaseModel):
    """Запрос оценки маршрута."""

    start_station_id: EntityId
    end_station_id: EntityId


class RouteOfferDTO(BaseModel):
    """Предложение маршрута."""

    id: str
    driver_id: str
    start_station_id: str
    end_station_id: str
    polyline_points: list[dict[str, float]]
    departure_time: datetime
    flex_minutes: int
    capacity_total: int
    capacity_available: int
    max_detour_minutes: int
    pickup_mode: PickupMode
    status: RouteOfferStatus
    created_at: Optional[datetime] = None

    @classmethod
    def from_offer(cls, offer: RouteOffer) -> RouteOfferDTO:
        return cls(
            id=offer.id,
            driver_id=offer.driver_id,
            start_station_id=offer.start_station_id,
            end_station_id=offer.end_station_id,
            polyline_points=[p.to_dict() for p in offer.points()],
            departure_time=offer.departure_time,
            flex_minutes=offer.flex_minutes,
            capacity_total=offer.capacity_total,
            capacity_available=offer.capacity_available,
            max_detour_minutes=offer.max_detour_minutes,
            pickup_mode=offer.pickup_mode,
            status=offer.status,
            created_at=offer.created_at,
        )


class RouteCreateResponse(BaseModel):
    """Созданный маршрут с оценкой."""

    route: RouteOfferDTO
    distance_meters: float
    duration_seconds: float

    @classmethod
    def from_created(cls, created: CreatedRoute) -> RouteCreateResponse:
        return cls(
            route=RouteOfferDTO.from_offer(created.offer),
            distance_meters=created.distance_meters,
            duration_seconds=created.duration_seconds,
        )


class ProjectionDTO(BaseModel):
    """Проекция станции на маршрут."""

    lat: float
    lng: float
    pos_meters: float
    distance_meters: float

    @classmethod
    def from_projection(cls, projection: Projection) -> ProjectionDTO:
        return cls(
            lat=projection.closest_point.latitude,
            lng=projection.closest_point.longitude,
            pos_meters=projection.pos_meters,
            distance_meters=projection.distance_meters,
        )


class RouteMatchDTO(BaseModel):
    """Результат поиска маршрута."""

    offer: RouteOfferDTO
    pickup_projection: ProjectionDTO
    dropoff_projection: ProjectionDTO

    @classmethod
    def from_match(cls, match: RouteMatch) -> RouteMatchDTO:
        return cls(
            offer=RouteOfferDTO.from_offer(match.offer),
            pickup_projection=ProjectionDTO.from_projection(match.pickup_projection),
            dropoff_projection=ProjectionDTO.from_projection(match.dropoff_projection),
        )


class DriverBookingDTO(BaseModel):
    """Бронирование глазами водителя (без PIN-кода)."""

    id: str
    route_offer_id: str
    rider_id: str
    seats_requested: int
    pickup_station_id: str
    dropoff_station_id: str
    pickup_pos_meters: float
    dropoff_pos_meters: float
    price_cents: int
    currency: str
    status: BookingStatus
    created_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking: Booking) -> DriverBookingDTO:
        return cls(**booking.model_dump(exclude={"pin_code"}))


class RiderBookingDTO(DriverBookingDTO):
    """Бронирование пассажира, PIN показывается водителю при посадке."""

    pin_code: str

    @classmethod
    def from_booking(cls, booking: Booking) -> RiderBookingDTO:
        return cls(**booking.model_dump())


class BoardRequest(BaseModel):
    """Запрос посадки по PIN-коду."""

    pin_code: str = Field(..., min_length=4, max_length=4)
