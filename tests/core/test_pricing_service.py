# tests/core/test_pricing_service.py
"""
Тесты для расчёта стоимости сегмента.
"""

from __future__ import annotations

import math

import pytest

from src.common.exceptions import InvalidSegmentOrderError
from src.config.loader import PricingSettings
from src.core.geo import GeoPoint
from src.core.geo.service import EARTH_RADIUS_M
from src.core.pricing import SegmentPricer, round_half_up

ONE_DEGREE_M = EARTH_RADIUS_M * math.pi / 180

EQUATOR = [GeoPoint(0.0, 0.0), GeoPoint(0.0, 1.0), GeoPoint(0.0, 2.0)]


@pytest.fixture
def pricer() -> SegmentPricer:
    """Калькулятор с тарифами по умолчанию."""
    return SegmentPricer(PricingSettings())


class TestRoundHalfUp:
    """Тесты для округления."""

    @pytest.mark.parametrize("value,expected", [
        (0.0, 0),
        (0.49, 0),
        (0.5, 1),
        (2.5, 3),
        (3.5, 4),
        (424.999, 425),
        (11189.2866, 11189),
    ])
    def test_half_up(self, value: float, expected: int) -> None:
        """Проверяет, что половины округляются вверх, а не к чётному."""
        assert round_half_up(value) == expected


class TestSegmentPricer:
    """Тесты для SegmentPricer."""

    def test_loads_defaults(self, pricer: SegmentPricer) -> None:
        """Проверяет тарифы по умолчанию."""
        assert pricer.assumed_speed_mps == 12.0
        assert pricer.base_cents == 500
        assert pricer.per_km_cents == 100
        assert pricer.per_min_cents == 10
        assert pricer.multiplier == 0.85
        assert pricer.currency == "EUR"

    def test_zero_segment_costs_base(self, pricer: SegmentPricer) -> None:
        """Проверяет, что пустой сегмент стоит базовый тариф со скидкой."""
        seconds, cents = pricer.calculate_fare(0.0)

        assert seconds == 0.0
        assert cents == 425

    def test_fare_formula(self, pricer: SegmentPricer) -> None:
        """Проверяет формулу (база + км + минуты) * множитель."""
        seconds, cents = pricer.calculate_fare(12_000.0)

        # 12 км, 1000 с = 16.67 мин: (500 + 1200 + 166.67) * 0.85 = 1586.67
        assert seconds == pytest.approx(1000.0)
        assert cents == 1587

    def test_custom_tariff(self) -> None:
        """Проверяет тарифы из переданного конфига."""
        pricer = SegmentPricer(PricingSettings(
            ASSUMED_SPEED_MPS=10.0,
            BASE_CENTS=0,
            PER_KM_CENTS=200,
            PER_MIN_CENTS=0,
            CARPOOL_MULTIPLIER=1.0,
            DEFAULT_CURRENCY="USD",
        ))

        seconds, cents = pricer.calculate_fare(2_500.0)

        assert seconds == pytest.approx(250.0)
        assert cents == 500
        assert pricer.currency == "USD"

    def test_price_segment_scenario(self, pricer: SegmentPricer) -> None:
        """Проверяет сегмент посередине маршрута вдоль экватора."""
        price = pricer.price_segment(EQUATOR, GeoPoint(0.0, 0.5), GeoPoint(0.0, 1.5))

        assert price.pickup_pos_meters == pytest.approx(55_597.46, abs=0.01)
        assert price.dropoff_pos_meters == pytest.approx(166_792.39, abs=0.01)
        assert price.segment_meters == pytest.approx(ONE_DEGREE_M)
        assert price.segment_seconds == pytest.approx(ONE_DEGREE_M / 12.0)
        assert price.price_cents == 11189
        assert price.pickup_projection.distance_meters == pytest.approx(0.0, abs=1e-6)

    def test_price_is_deterministic(self, pricer: SegmentPricer) -> None:
        """Проверяет повторяемость расчёта."""
        first = pricer.price_segment(EQUATOR, GeoPoint(0.0, 0.3), GeoPoint(0.0, 1.9))
        second = pricer.price_segment(EQUATOR, GeoPoint(0.0, 0.3), GeoPoint(0.0, 1.9))

        assert first == second

    def test_reversed_order(self, pricer: SegmentPricer) -> None:
        """Проверяет ошибку при посадке после высадки."""
        with pytest.raises(InvalidSegmentOrderError) as exc_info:
            pricer.price_segment(EQUATOR, GeoPoint(0.0, 1.5), GeoPoint(0.0, 0.5))

        assert exc_info.value.status_code == 400
        assert exc_info.value.details["pickup_pos_meters"] > exc_info.value.details["dropoff_pos_meters"]

    def test_same_station(self, pricer: SegmentPricer) -> None:
        """Проверяет ошибку при совпадении станций посадки и высадки."""
        with pytest.raises(InvalidSegmentOrderError):
            pricer.price_segment(EQUATOR, GeoPoint(0.0, 1.0), GeoPoint(0.0, 1.0))

    def test_degenerate_polyline(self, pricer: SegmentPricer) -> None:
        """Проверяет, что полилиния из одной точки не даёт сегмента."""
        with pytest.raises(InvalidSegmentOrderError):
            pricer.price_segment([GeoPoint(0.0, 0.0)], GeoPoint(0.0, 0.5), GeoPoint(0.0, 1.5))
