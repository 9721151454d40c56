# src/core/stations/__init__.py
"""
Станции посадки и высадки.
"""

from src.core.stations.models import Station
from src.core.stations.repository import StationRepository
from src.core.stations.service import StationService

__all__ = ["Station", "StationRepository", "StationService"]
