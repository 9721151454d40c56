# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")
os.environ.setdefault("RABBITMQ_PASSWORD", "guest")

from src.common.constants import BookingStatus, RouteOfferStatus  # noqa: E402
from src.core.stations.models import Station  # noqa: E402
from tests.fakes import (  # noqa: E402
    DEPARTURE,
    EQUATOR_POLYLINE,
    FakeBookingRepository,
    FakeDatabase,
    FakeRouteOfferRepository,
    FakeStationRepository,
)


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "Тестовая конфигурация",
        "PROJECT_NAME": "carpool_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
        "CARPOOL_SERVICE_HOST": "127.0.0.1",
        "CARPOOL_SERVICE_PORT": 9000,
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "colored",
        "DB_HOST": "localhost",
        "DB_PORT": 5432,
        "DB_NAME": "carpool_test",
        "DB_USER": "postgres",
        "DB_MIN_POOL_SIZE": 1,
        "DB_MAX_POOL_SIZE": 5,
        "REDIS_HOST": "localhost",
        "REDIS_PORT": 6379,
        "REDIS_DB": 1,
        "REDIS_NAMESPACE": "carpool_test",
        "STATION_TTL": 600,
        "RABBITMQ_HOST": "localhost",
        "RABBITMQ_EXCHANGE": "carpool_test.events",
        "ASSUMED_SPEED_MPS": 10.0,
        "BASE_CENTS": 300,
        "PER_KM_CENTS": 50,
        "PER_MIN_CENTS": 5,
        "CARPOOL_MULTIPLIER": 1.0,
        "DEFAULT_CURRENCY": "USD",
        "STATION_TOLERANCE_METERS": 150.0,
        "SEARCH_WINDOW_MINUTES": 30,
        "STRAIGHT_LINE_SEGMENTS": 8,
        "ROAD_FACTOR": 1.5,
        "AVG_SPEED_KMH": 40.0,
        "PIN_MIN": 1000,
        "PIN_MAX": 1999,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Временный файл конфигурации."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    config_file = config_dir / "config.json"
    config_file.write_text(json.dumps(mock_config), encoding="utf-8")
    return config_file


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ
# =============================================================================

@pytest.fixture
def mock_db() -> AsyncMock:
    """Мок менеджера базы данных."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.fetchval = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="OK")
    return db


@pytest.fixture
def mock_redis() -> MagicMock:
    """Мок клиента Redis."""
    redis = MagicMock()
    redis.is_connected = True
    redis.get_model = AsyncMock(return_value=None)
    redis.set_model = AsyncMock(return_value=True)
    redis.health_check = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_event_bus() -> MagicMock:
    """Мок шины событий."""
    bus = MagicMock()
    bus.is_connected = True
    bus.publish = AsyncMock(return_value=None)
    return bus


# =============================================================================
# ТЕСТОВЫЕ ДАННЫЕ
# =============================================================================

@pytest.fixture
def equator_stations() -> list[Station]:
    """
    Станции на экваторе: A и B концы маршрута, P и D на нём,
    FAR в сотне километров от маршрута.
    """
    return [
        Station(id="A", name="Alpha", city="Equator", latitude=0.0, longitude=0.0),
        Station(id="P", name="Pickup", city="Equator", latitude=0.0, longitude=0.5),
        Station(id="D", name="Dropoff", city="Equator", latitude=0.0, longitude=1.5),
        Station(id="B", name="Bravo", city="Equator", latitude=0.0, longitude=2.0),
        Station(id="FAR", name="Faraway", city="Equator", latitude=1.0, longitude=1.0),
    ]


@pytest.fixture
def sample_station_row() -> dict[str, Any]:
    """Строка станции из БД."""
    return {
        "id": 7,
        "name": "Hauptbahnhof",
        "city": "Hamburg",
        "lat": 53.5530,
        "lng": 10.0069,
        "active": True,
    }


@pytest.fixture
def sample_offer_row() -> dict[str, Any]:
    """Строка предложения маршрута из БД."""
    return {
        "id": 11,
        "driver_id": 100,
        "start_station_id": 1,
        "end_station_id": 4,
        "polyline": EQUATOR_POLYLINE,
        "departure_time": DEPARTURE,
        "flex_minutes": 15,
        "capacity_total": 3,
        "capacity_available": 3,
        "max_detour_minutes": 0,
        "pickup_mode": "stations",
        "status": RouteOfferStatus.PUBLISHED.value,
        "created_at": datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
    }


@pytest.fixture
def sample_booking_row() -> dict[str, Any]:
    """Строка бронирования из БД."""
    return {
        "id": 21,
        "route_offer_id": 11,
        "rider_id": 200,
        "seats_requested": 1,
        "pickup_station_id": 2,
        "dropoff_station_id": 3,
        "pickup_pos_meters": 55597.46,
        "dropoff_pos_meters": 166792.39,
        "price_cents": 11189,
        "currency": "EUR",
        "pin_code": "4321",
        "status": BookingStatus.REQUESTED.value,
        "created_at": datetime(2026, 3, 1, 13, 0, tzinfo=timezone.utc),
    }


# =============================================================================
# IN-MEMORY ХРАНИЛИЩА
# =============================================================================

@pytest.fixture
def fake_db() -> FakeDatabase:
    """Транзакции с откатом изменений in-memory репозиториев."""
    return FakeDatabase()


@pytest.fixture
def station_repo(equator_stations: list[Station]) -> FakeStationRepository:
    """Справочник станций в памяти."""
    return FakeStationRepository(equator_stations)


@pytest.fixture
def offer_repo() -> FakeRouteOfferRepository:
    """Предложения маршрутов в памяти."""
    return FakeRouteOfferRepository()


@pytest.fixture
def booking_repo() -> FakeBookingRepository:
    """Бронирования в памяти."""
    return FakeBookingRepository()
