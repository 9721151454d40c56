# src/core/stations/models.py
"""
Модели данных станций.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from src.core.geo import GeoPoint


class Station(BaseModel):
    """Станция посадки/высадки. Справочные данные, не меняются."""

    id: str = Field(..., description="ID станции")
    name: str = Field(..., description="Название")
    city: Optional[str] = Field(None, description="Город")
    latitude: float = Field(..., ge=-90.0, le=90.0, description="Широта")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Долгота")
    active: bool = Field(True, description="Доступна ли станция")

    class Config:
        from_attributes = True

    @property
    def point(self) -> GeoPoint:
        """Координаты станции."""
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)
