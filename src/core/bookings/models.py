# src/core/bookings/models.py
"""
Модели данных бронирований.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from src.common.constants import BookingStatus
from src.shared.models.common import EntityId


class Booking(BaseModel):
    """Бронирование мест пассажиром в предложении маршрута."""

    id: str = Field(..., description="ID бронирования")
    route_offer_id: str = Field(..., description="ID предложения маршрута")
    rider_id: str = Field(..., description="ID пассажира")
    seats_requested: int = Field(..., gt=0, description="Запрошено мест")

    pickup_station_id: str = Field(..., description="Станция посадки")
    dropoff_station_id: str = Field(..., description="Станция высадки")
    pickup_pos_meters: float = Field(..., ge=0.0, description="Позиция посадки на маршруте, м")
    dropoff_pos_meters: float = Field(..., ge=0.0, description="Позиция высадки на маршруте, м")

    price_cents: int = Field(..., ge=0, description="Стоимость в центах")
    currency: str = Field(..., description="Валюта")
    pin_code: str = Field(..., pattern=r"^\d{4}$", description="PIN-код посадки")

    status: BookingStatus = Field(BookingStatus.REQUESTED, description="Статус бронирования")
    created_at: Optional[datetime] = Field(None, description="Время создания")

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def check_segment_order(self) -> Booking:
        if self.pickup_pos_meters >= self.dropoff_pos_meters:
            raise ValueError("pickup_pos_meters должен быть меньше dropoff_pos_meters")
        return self

    @property
    def holds_seats(self) -> bool:
        """Занимает ли бронирование места в машине."""
        return self.status in (
            BookingStatus.ACCEPTED,
            BookingStatus.BOARDED,
            BookingStatus.DROPPED,
        )


class BookingCreate(BaseModel):
    """Данные для записи нового бронирования."""

    route_offer_id: str
    rider_id: str
    seats_requested: int = Field(..., gt=0)
    pickup_station_id: str
    dropoff_station_id: str
    pickup_pos_meters: float
    dropoff_pos_meters: float
    price_cents: int = Field(..., ge=0)
    currency: str
    pin_code: str


class BookingRequestDTO(BaseModel):
    """DTO запроса бронирования пассажиром."""

    rider_id: EntityId
    route_offer_id: EntityId
    pickup_station_id: EntityId
    dropoff_station_id: EntityId
    seats: int = Field(..., gt=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
