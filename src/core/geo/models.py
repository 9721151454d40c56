# src/core/geo/models.py
"""
Геометрические значения: точка, проекция на маршрут, маршрут по прямой.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class GeoPoint:
    """Географическая точка в градусах."""
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError(f"Координаты должны быть конечными: ({self.latitude}, {self.longitude})")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Широта вне диапазона [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Долгота вне диапазона [-180, 180]: {self.longitude}")

    def to_dict(self) -> dict[str, float]:
        """Форма хранения в JSON-полилинии."""
        return {"lat": self.latitude, "lng": self.longitude}


@dataclass(frozen=True)
class Projection:
    """
    Ближайшая к запросу точка полилинии.

    pos_meters: расстояние вдоль маршрута от его начала до closest_point
    distance_meters: расстояние от точки запроса до closest_point
    """
    closest_point: GeoPoint
    pos_meters: float
    distance_meters: float


@dataclass(frozen=True)
class StraightLineRoute:
    """Маршрут по прямой между двумя станциями."""
    points: list[GeoPoint] = field(default_factory=list)
    distance_meters: float = 0.0
    duration_seconds: float = 0.0
