# src/core/stations/service.py
"""
Сервис станций: справочник и поиск ближайшей.
"""

from __future__ import annotations

import math

from src.common.exceptions import StationNotFoundError
from src.core.geo import GeoPoint, haversine_meters
from src.core.stations.models import Station
from src.core.stations.repository import StationRepository


class StationService:
    """Сервис станций."""

    def __init__(self, repository: StationRepository) -> None:
        self._repo = repository

    async def get_station(self, station_id: str) -> Station:
        """
        Получает станцию по ID.

        Raises:
            StationNotFoundError: станции нет
        """
        station = await self._repo.get_by_id(station_id)
        if station is None:
            raise StationNotFoundError(f"Станция {station_id} не найдена", station_id=station_id)
        return station

    async def list_stations(self, city: str | None = None) -> list[Station]:
        """Активные станции, отсортированные по имени."""
        return await self._repo.list_active(city)

    async def nearest_station(
        self,
        latitude: float,
        longitude: float,
        city: str | None = None,
    ) -> tuple[Station, float]:
        """
        Ближайшая активная станция к точке.

        Args:
            latitude: Широта
            longitude: Долгота
            city: Фильтр по городу

        Returns:
            (станция, расстояние в метрах)

        Raises:
            ValueError: координаты не конечные или вне диапазона
            StationNotFoundError: нет ни одной активной станции
        """
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            raise ValueError("lat и lng должны быть конечными числами")

        point = GeoPoint(latitude=latitude, longitude=longitude)

        stations = await self._repo.list_active(city)
        if not stations:
            raise StationNotFoundError("Нет активных станций", city=city)

        best: Station | None = None
        best_distance = math.inf
        for station in stations:
            distance = haversine_meters(point, station.point)
            if distance < best_distance:
                best = station
                best_distance = distance

        assert best is not None
        return best, best_distance
