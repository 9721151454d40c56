# src/core/geo/service.py
"""
Геометрия маршрутов.

Расстояния считаются по формуле гаверсинусов, параметр проекции точки
на отрезок считается в плоском приближении по lat/lng.
Все функции чистые и потокобезопасные.
"""

from __future__ import annotations

import json
import math
from typing import Any, Sequence

from src.common.exceptions import MalformedPolylineError
from src.core.geo.models import GeoPoint, Projection, StraightLineRoute

EARTH_RADIUS_M = 6_371_000.0


def haversine_meters(a: GeoPoint, b: GeoPoint) -> float:
    """
    Расстояние по большому кругу между двумя точками в метрах.

    Args:
        a: Первая точка
        b: Вторая точка

    Returns:
        Неотрицательное расстояние, симметричное по аргументам
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)

    sin_d_lat = math.sin(d_lat / 2)
    sin_d_lng = math.sin(d_lng / 2)
    h = sin_d_lat * sin_d_lat + math.cos(lat1) * math.cos(lat2) * sin_d_lng * sin_d_lng

    # Погрешность float может дать sqrt(h) чуть больше 1 у антиподов
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def cumulative_distances(points: Sequence[GeoPoint]) -> list[float]:
    """
    Накопленные расстояния вдоль полилинии.

    Returns:
        [] для пустой полилинии, иначе cum[0] = 0 и
        cum[i] = cum[i-1] + haversine(points[i-1], points[i])
    """
    if not points:
        return []

    cum = [0.0]
    for prev, cur in zip(points, points[1:]):
        cum.append(cum[-1] + haversine_meters(prev, cur))
    return cum


def project_point_to_polyline(
    point: GeoPoint,
    points: Sequence[GeoPoint],
    cum: Sequence[float] | None = None,
) -> Projection:
    """
    Проецирует точку на полилинию.

    Перебирает все отрезки, для каждого находит параметр t в [0, 1]
    (без экстраполяции за концы), интерполирует точку в lat/lng и меряет
    до неё настоящее расстояние. Побеждает строго минимальное расстояние,
    при равенстве остаётся первый отрезок.

    Args:
        point: Точка запроса
        points: Полилиния в порядке движения
        cum: Заранее посчитанные накопленные расстояния (необязательно)

    Returns:
        Проекция с позицией вдоль маршрута и отклонением от него
    """
    if len(points) < 2:
        # Вырожденная полилиния: проецируем на единственную точку
        only = points[0] if points else point
        return Projection(
            closest_point=only,
            pos_meters=0.0,
            distance_meters=haversine_meters(point, only),
        )

    if cum is None:
        cum = cumulative_distances(points)
    elif len(cum) != len(points):
        raise ValueError(
            f"Длина накопленных расстояний ({len(cum)}) не совпадает с полилинией ({len(points)})"
        )

    p_lat = math.radians(point.latitude)
    p_lng = math.radians(point.longitude)

    best: Projection | None = None

    for i in range(len(points) - 1):
        a = points[i]
        b = points[i + 1]

        a_lat = math.radians(a.latitude)
        a_lng = math.radians(a.longitude)

        vx = math.radians(b.latitude) - a_lat
        vy = math.radians(b.longitude) - a_lng
        wx = p_lat - a_lat
        wy = p_lng - a_lng

        seg_len_sq = vx * vx + vy * vy
        t = (vx * wx + vy * wy) / seg_len_sq if seg_len_sq > 0 else 0.0
        t = max(0.0, min(1.0, t))

        candidate = GeoPoint(
            latitude=a.latitude + (b.latitude - a.latitude) * t,
            longitude=a.longitude + (b.longitude - a.longitude) * t,
        )
        distance = haversine_meters(point, candidate)

        if best is None or distance < best.distance_meters:
            best = Projection(
                closest_point=candidate,
                pos_meters=cum[i] + haversine_meters(a, b) * t,
                distance_meters=distance,
            )

    assert best is not None
    return best


def build_straight_line_polyline(
    start: GeoPoint,
    end: GeoPoint,
    segments: int = 16,
    road_factor: float = 1.3,
    avg_speed_kmh: float = 30.0,
) -> StraightLineRoute:
    """
    Строит маршрут по прямой между двумя точками.

    Полилиния состоит из segments равных шагов в lat/lng (segments + 1 точка).
    Длина дороги оценивается как прямая * road_factor.

    Args:
        start: Начальная точка
        end: Конечная точка
        segments: Количество отрезков
        road_factor: Коэффициент извилистости дороги
        avg_speed_kmh: Средняя скорость для оценки времени

    Returns:
        Точки маршрута, длина (м) и длительность (с)
    """
    if segments < 1:
        raise ValueError("Количество отрезков должно быть не меньше 1")

    points = [
        GeoPoint(
            latitude=start.latitude + (end.latitude - start.latitude) * (i / segments),
            longitude=start.longitude + (end.longitude - start.longitude) * (i / segments),
        )
        for i in range(segments + 1)
    ]

    distance_meters = haversine_meters(start, end) * road_factor
    duration_seconds = (distance_meters / 1000 / avg_speed_kmh) * 3600

    return StraightLineRoute(
        points=points,
        distance_meters=distance_meters,
        duration_seconds=duration_seconds,
    )


# =============================================================================
# ФОРМА ХРАНЕНИЯ ПОЛИЛИНИИ
# =============================================================================

def parse_polyline(raw: str | Sequence[Any]) -> list[GeoPoint]:
    """
    Разбирает полилинию из JSON-массива объектов {"lat", "lng"}.

    Порядок точек сохраняется. Пустой массив, не-массив, лишние типы
    и координаты вне диапазона дают MalformedPolylineError.
    """
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    except (json.JSONDecodeError, ValueError, RecursionError) as e:
        # ValueError: целые длиннее лимита int_max_str_digits
        raise MalformedPolylineError(f"Полилиния не является JSON: {e}") from e

    if not isinstance(data, list) or not data:
        raise MalformedPolylineError("Полилиния должна быть непустым JSON-массивом")

    points: list[GeoPoint] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedPolylineError(f"Точка #{index} не является объектом")

        lat = item.get("lat")
        lng = item.get("lng")
        if not _is_number(lat) or not _is_number(lng):
            raise MalformedPolylineError(f"Точка #{index} должна содержать числовые lat и lng")

        try:
            points.append(GeoPoint(latitude=float(lat), longitude=float(lng)))
        except (ValueError, OverflowError) as e:
            raise MalformedPolylineError(f"Точка #{index}: {e}") from e

    return points


def dump_polyline(points: Sequence[GeoPoint]) -> str:
    """Сериализует полилинию в JSON-массив {"lat", "lng"}."""
    if not points:
        raise MalformedPolylineError("Нельзя сохранить пустую полилинию")
    return json.dumps([p.to_dict() for p in points])


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
