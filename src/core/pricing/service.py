# src/core/pricing/service.py
"""
Расчёт стоимости сегмента поездки.
Сегмент задаётся проекциями станций посадки и высадки на маршрут водителя.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING

from src.common.exceptions import InvalidSegmentOrderError
from src.core.geo import GeoPoint, Projection, cumulative_distances, project_point_to_polyline

if TYPE_CHECKING:
    from src.config.loader import PricingSettings


@dataclass(frozen=True)
class SegmentPrice:
    """Результат расчёта сегмента."""
    pickup_pos_meters: float
    dropoff_pos_meters: float
    segment_meters: float
    segment_seconds: float
    price_cents: int
    pickup_projection: Projection
    dropoff_projection: Projection


def round_half_up(value: float) -> int:
    """Округление к ближайшему целому, половины вверх."""
    return int(math.floor(value + 0.5))


class SegmentPricer:
    """Калькулятор стоимости сегмента маршрута."""

    def __init__(self, config: PricingSettings | None = None) -> None:
        """
        Инициализация с загрузкой тарифов из конфига.

        Args:
            config: Настройки тарифов (из settings.pricing если None)
        """
        if config is None:
            from src.config import settings
            config = settings.pricing

        self.assumed_speed_mps = config.ASSUMED_SPEED_MPS
        self.base_cents = config.BASE_CENTS
        self.per_km_cents = config.PER_KM_CENTS
        self.per_min_cents = config.PER_MIN_CENTS
        self.multiplier = config.CARPOOL_MULTIPLIER
        self.currency = config.DEFAULT_CURRENCY

    def calculate_fare(self, segment_meters: float) -> tuple[float, int]:
        """
        Считает длительность и стоимость сегмента.

        Args:
            segment_meters: Длина сегмента в метрах

        Returns:
            (длительность в секундах, стоимость в центах)
        """
        segment_seconds = segment_meters / self.assumed_speed_mps

        km = segment_meters / 1000
        minutes = segment_seconds / 60

        # Округляем один раз, после множителя
        raw = (self.base_cents + self.per_km_cents * km + self.per_min_cents * minutes) * self.multiplier
        return segment_seconds, round_half_up(raw)

    def price_segment(
        self,
        points: Sequence[GeoPoint],
        pickup: GeoPoint,
        dropoff: GeoPoint,
    ) -> SegmentPrice:
        """
        Проецирует станции на маршрут и считает стоимость.

        Args:
            points: Полилиния маршрута
            pickup: Координаты станции посадки
            dropoff: Координаты станции высадки

        Returns:
            Позиции на маршруте, длина, длительность и цена

        Raises:
            InvalidSegmentOrderError: посадка не раньше высадки по маршруту
        """
        cum = cumulative_distances(points)
        pickup_projection = project_point_to_polyline(pickup, points, cum)
        dropoff_projection = project_point_to_polyline(dropoff, points, cum)

        if pickup_projection.pos_meters >= dropoff_projection.pos_meters:
            raise InvalidSegmentOrderError(
                "Станция посадки должна быть раньше станции высадки по маршруту",
                pickup_pos_meters=pickup_projection.pos_meters,
                dropoff_pos_meters=dropoff_projection.pos_meters,
            )

        segment_meters = dropoff_projection.pos_meters - pickup_projection.pos_meters
        segment_seconds, price_cents = self.calculate_fare(segment_meters)

        return SegmentPrice(
            pickup_pos_meters=pickup_projection.pos_meters,
            dropoff_pos_meters=dropoff_projection.pos_meters,
            segment_meters=segment_meters,
            segment_seconds=segment_seconds,
            price_cents=price_cents,
            pickup_projection=pickup_projection,
            dropoff_projection=dropoff_projection,
        )
