# src/core/matching/service.py
"""
Матчинг предложений маршрутов с запросом пассажира.

Кандидаты заранее отфильтрованы хранилищем (опубликованы, достаточно мест,
время в грубом окне). Здесь проверяется геометрия и допуск по времени.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, TYPE_CHECKING

from src.common.exceptions import MalformedPolylineError
from src.common.logger import get_logger
from src.core.geo import GeoPoint, Projection, cumulative_distances, project_point_to_polyline

if TYPE_CHECKING:
    from src.core.routes.models import RouteOffer

logger = get_logger("matching")


def as_utc(value: datetime) -> datetime:
    """Приводит время к UTC; наивное время считается UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class RouteMatch:
    """Подходящее предложение с проекциями станций."""
    offer: RouteOffer
    pickup_projection: Projection
    dropoff_projection: Projection

    @property
    def segment_meters(self) -> float:
        return self.dropoff_projection.pos_meters - self.pickup_projection.pos_meters


class RouteMatcher:
    """
    Фильтр кандидатов по близости станций к маршруту,
    направлению движения и времени отправления.

    Чистый и синхронный: не ходит в хранилище и не держит состояния
    между вызовами.
    """

    def __init__(self, tolerance_meters: float | None = None) -> None:
        """
        Args:
            tolerance_meters: Максимальное удаление станции от маршрута
                (из settings.matching если None)
        """
        if tolerance_meters is None:
            from src.config import settings
            tolerance_meters = settings.matching.STATION_TOLERANCE_METERS

        self.tolerance_meters = tolerance_meters

    def match(
        self,
        pickup: GeoPoint,
        dropoff: GeoPoint,
        desired_time: datetime,
        seats: int,
        candidates: Iterable[RouteOffer],
    ) -> list[RouteMatch]:
        """
        Отбирает подходящие предложения.

        Порядок результата совпадает с порядком кандидатов, ранжирования нет.
        Предложение с битой геометрией пропускается и логируется,
        поиск при этом продолжается.

        Args:
            pickup: Координаты станции посадки
            dropoff: Координаты станции высадки
            desired_time: Желаемое время отправления
            seats: Запрошенное количество мест
            candidates: Предложения-кандидаты

        Returns:
            Список совпадений
        """
        desired = as_utc(desired_time)
        results: list[RouteMatch] = []

        for offer in candidates:
            if offer.capacity_available < seats:
                continue

            try:
                points = offer.points()
            except MalformedPolylineError as e:
                logger.warning(f"Пропуск предложения {offer.id}: битая полилиния ({e.message})")
                continue

            cum = cumulative_distances(points)
            pickup_projection = project_point_to_polyline(pickup, points, cum)
            dropoff_projection = project_point_to_polyline(dropoff, points, cum)

            if (
                pickup_projection.distance_meters > self.tolerance_meters
                or dropoff_projection.distance_meters > self.tolerance_meters
            ):
                continue

            # Маршрут направленный: посадка строго раньше высадки
            if pickup_projection.pos_meters >= dropoff_projection.pos_meters:
                continue

            diff_minutes = abs((as_utc(offer.departure_time) - desired).total_seconds()) / 60
            if diff_minutes > offer.flex_minutes:
                continue

            results.append(RouteMatch(
                offer=offer,
                pickup_projection=pickup_projection,
                dropoff_projection=dropoff_projection,
            ))

        return results
