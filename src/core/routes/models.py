# src/core/routes/models.py
"""
Модели данных предложений маршрутов.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from src.common.constants import PickupMode, RouteOfferStatus
from src.shared.models.common import EntityId
from src.core.geo import GeoPoint, parse_polyline


class RouteOffer(BaseModel):
    """Предложение маршрута водителя."""

    id: str = Field(..., description="ID предложения")
    driver_id: str = Field(..., description="ID водителя")

    start_station_id: str = Field(..., description="Станция начала маршрута")
    end_station_id: str = Field(..., description="Станция конца маршрута")

    # JSON-массив {"lat", "lng"} в порядке движения
    polyline: str = Field(..., description="Геометрия маршрута")

    departure_time: datetime = Field(..., description="Время отправления")
    flex_minutes: int = Field(..., ge=0, description="Допуск по времени отправления, мин")

    capacity_total: int = Field(..., gt=0, description="Всего мест")
    capacity_available: int = Field(..., ge=0, description="Свободных мест")

    max_detour_minutes: int = Field(0, ge=0, description="Допустимый крюк, мин")
    pickup_mode: PickupMode = Field(PickupMode.STATIONS, description="Режим посадки")
    status: RouteOfferStatus = Field(RouteOfferStatus.DRAFT, description="Статус предложения")

    created_at: Optional[datetime] = Field(None, description="Время создания")

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def check_capacity(self) -> RouteOffer:
        if self.capacity_available > self.capacity_total:
            raise ValueError("capacity_available не может превышать capacity_total")
        return self

    @property
    def is_published(self) -> bool:
        """Опубликовано ли предложение."""
        return self.status == RouteOfferStatus.PUBLISHED

    def points(self) -> list[GeoPoint]:
        """Разбирает сохранённую полилинию (MalformedPolylineError при ошибке)."""
        return parse_polyline(self.polyline)


class RouteCreateDTO(BaseModel):
    """DTO для создания предложения маршрута."""

    start_station_id: EntityId
    end_station_id: EntityId
    departure_time: datetime
    flex_minutes: int = Field(..., ge=0)
    capacity_total: int = Field(..., gt=0)
    max_detour_minutes: int = Field(0, ge=0)
    pickup_mode: PickupMode = PickupMode.STATIONS


class RouteEstimate(BaseModel):
    """Оценка маршрута по прямой между станциями."""

    distance_meters: float
    duration_seconds: float
    polyline_points: list[dict[str, float]]


class RouteSearchDTO(BaseModel):
    """DTO поиска маршрутов пассажиром."""

    pickup_station_id: EntityId
    dropoff_station_id: EntityId
    desired_time: datetime
    seats: int = Field(..., gt=0)
