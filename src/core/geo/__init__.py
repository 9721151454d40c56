# src/core/geo/__init__.py
"""
Геометрия маршрутов.
Расстояния по большому кругу, проекция точки на полилинию, маршрут по прямой.
"""

from src.core.geo.models import GeoPoint, Projection, StraightLineRoute
from src.core.geo.service import (
    haversine_meters,
    cumulative_distances,
    project_point_to_polyline,
    build_straight_line_polyline,
    parse_polyline,
    dump_polyline,
)

__all__ = [
    "GeoPoint",
    "Projection",
    "StraightLineRoute",
    "haversine_meters",
    "cumulative_distances",
    "project_point_to_polyline",
    "build_straight_line_polyline",
    "parse_polyline",
    "dump_polyline",
]
