# src/core/matching/__init__.py
"""
Матчинг предложений маршрутов.
"""

from src.core.matching.service import RouteMatcher, RouteMatch, as_utc

__all__ = ["RouteMatcher", "RouteMatch", "as_utc"]
