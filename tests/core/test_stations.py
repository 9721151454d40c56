# tests/core/test_stations.py
"""
Тесты для справочника станций.
"""

from __future__ import annotations

import math
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.common.exceptions import StationNotFoundError
from src.core.stations import Station, StationRepository, StationService
from tests.fakes import FakeStationRepository


class TestStationModel:
    """Тесты для модели Station."""

    def test_point(self) -> None:
        """Проверяет координаты станции."""
        station = Station(id="1", name="Hbf", latitude=53.553, longitude=10.0069)

        assert station.point.latitude == 53.553
        assert station.point.longitude == 10.0069
        assert station.active is True

    def test_invalid_latitude(self) -> None:
        """Проверяет отклонение широты вне диапазона."""
        with pytest.raises(ValueError):
            Station(id="1", name="Bad", latitude=100.0, longitude=0.0)


class TestStationService:
    """Тесты для StationService."""

    @pytest.fixture
    def service(self, station_repo: FakeStationRepository) -> StationService:
        return StationService(station_repo)

    @pytest.mark.asyncio
    async def test_get_station(self, service: StationService) -> None:
        """Проверяет получение станции."""
        station = await service.get_station("P")
        assert station.name == "Pickup"

    @pytest.mark.asyncio
    async def test_get_missing_station(self, service: StationService) -> None:
        """Проверяет ошибку для несуществующей станции."""
        with pytest.raises(StationNotFoundError) as exc_info:
            await service.get_station("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {"station_id": "missing"}

    @pytest.mark.asyncio
    async def test_list_sorted_by_name(self, service: StationService) -> None:
        """Проверяет сортировку по имени."""
        stations = await service.list_stations()
        assert [s.name for s in stations] == ["Alpha", "Bravo", "Dropoff", "Faraway", "Pickup"]

    @pytest.mark.asyncio
    async def test_list_by_city(self, service: StationService) -> None:
        """Проверяет фильтр по городу."""
        assert await service.list_stations("Hamburg") == []
        assert len(await service.list_stations("Equator")) == 5

    @pytest.mark.asyncio
    async def test_nearest_station(self, service: StationService) -> None:
        """Проверяет поиск ближайшей станции."""
        station, distance = await service.nearest_station(0.001, 1.45)

        assert station.id == "D"
        assert 5_000 < distance < 6_000

    @pytest.mark.asyncio
    async def test_nearest_exact(self, service: StationService) -> None:
        """Проверяет нулевое расстояние до самой станции."""
        station, distance = await service.nearest_station(1.0, 1.0)

        assert station.id == "FAR"
        assert distance == 0.0

    @pytest.mark.asyncio
    async def test_nearest_skips_inactive(self) -> None:
        """Проверяет, что неактивные станции не участвуют."""
        service = StationService(FakeStationRepository([
            Station(id="closed", name="Closed", latitude=0.0, longitude=0.0, active=False),
            Station(id="open", name="Open", latitude=0.0, longitude=1.0),
        ]))

        station, _ = await service.nearest_station(0.0, 0.0)

        assert station.id == "open"

    @pytest.mark.asyncio
    async def test_nearest_no_stations(self) -> None:
        """Проверяет пустой справочник."""
        service = StationService(FakeStationRepository())

        with pytest.raises(StationNotFoundError):
            await service.nearest_station(0.0, 0.0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("lat,lng", [(math.nan, 0.0), (0.0, math.inf), (95.0, 0.0)])
    async def test_nearest_invalid_coordinates(
        self,
        service: StationService,
        lat: float,
        lng: float,
    ) -> None:
        """Проверяет отклонение некорректных координат."""
        with pytest.raises(ValueError):
            await service.nearest_station(lat, lng)


class TestStationRepository:
    """Тесты для StationRepository."""

    @pytest.fixture
    def repository(self, mock_db: AsyncMock, mock_redis: MagicMock) -> StationRepository:
        return StationRepository(mock_db, mock_redis, cache_ttl=600)

    @pytest.mark.asyncio
    async def test_get_from_db_and_cache(
        self,
        repository: StationRepository,
        mock_db: AsyncMock,
        mock_redis: MagicMock,
        sample_station_row: dict[str, Any],
    ) -> None:
        """Проверяет промах кэша: чтение из БД и запись в кэш."""
        mock_db.fetchrow.return_value = sample_station_row

        station = await repository.get_by_id("7")

        assert station is not None
        assert station.id == "7"
        assert station.latitude == 53.5530
        mock_db.fetchrow.assert_called_once()
        mock_redis.set_model.assert_called_once()
        assert mock_redis.set_model.call_args[0][0] == "station:7"
        assert mock_redis.set_model.call_args[1]["ttl"] == 600

    @pytest.mark.asyncio
    async def test_get_from_cache(
        self,
        repository: StationRepository,
        mock_db: AsyncMock,
        mock_redis: MagicMock,
    ) -> None:
        """Проверяет попадание в кэш без запроса к БД."""
        cached = Station(id="7", name="Hbf", latitude=53.553, longitude=10.0069)
        mock_redis.get_model.return_value = cached

        station = await repository.get_by_id("7")

        assert station == cached
        mock_db.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_missing(self, repository: StationRepository, mock_redis: MagicMock) -> None:
        """Проверяет отсутствующую станцию: ничего не кэшируется."""
        assert await repository.get_by_id("404") is None
        mock_redis.set_model.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_error_falls_back_to_db(
        self,
        repository: StationRepository,
        mock_db: AsyncMock,
        mock_redis: MagicMock,
        sample_station_row: dict[str, Any],
    ) -> None:
        """Проверяет, что недоступный кэш не ломает чтение."""
        mock_redis.get_model.side_effect = RedisConnectionError("down")
        mock_redis.set_model.side_effect = RedisConnectionError("down")
        mock_db.fetchrow.return_value = sample_station_row

        station = await repository.get_by_id("7")

        assert station is not None
        assert station.name == "Hauptbahnhof"

    @pytest.mark.asyncio
    async def test_without_redis(
        self,
        mock_db: AsyncMock,
        sample_station_row: dict[str, Any],
    ) -> None:
        """Проверяет работу без кэша."""
        mock_db.fetchrow.return_value = sample_station_row
        repository = StationRepository(mock_db, None, cache_ttl=600)

        station = await repository.get_by_id("7")

        assert station is not None

    @pytest.mark.asyncio
    async def test_redis_not_connected(
        self,
        repository: StationRepository,
        mock_db: AsyncMock,
        mock_redis: MagicMock,
        sample_station_row: dict[str, Any],
    ) -> None:
        """Проверяет, что неподключённый Redis пропускается."""
        mock_redis.is_connected = False
        mock_db.fetchrow.return_value = sample_station_row

        await repository.get_by_id("7")

        mock_redis.get_model.assert_not_called()
        mock_redis.set_model.assert_not_called()

    @pytest.mark.asyncio
    async def test_db_error_propagates(self, repository: StationRepository, mock_db: AsyncMock) -> None:
        """Проверяет, что ошибка БД пробрасывается."""
        mock_db.fetchrow.side_effect = OSError("connection lost")

        with pytest.raises(OSError):
            await repository.get_by_id("7")

    @pytest.mark.asyncio
    async def test_list_active_with_city(
        self,
        repository: StationRepository,
        mock_db: AsyncMock,
        sample_station_row: dict[str, Any],
    ) -> None:
        """Проверяет фильтр по городу в запросе."""
        mock_db.fetch.return_value = [sample_station_row]

        stations = await repository.list_active("Hamburg")

        assert [s.id for s in stations] == ["7"]
        query, city = mock_db.fetch.call_args[0]
        assert "city = $1" in query
        assert "ORDER BY name" in query
        assert city == "Hamburg"

    @pytest.mark.asyncio
    async def test_list_active_all(self, repository: StationRepository, mock_db: AsyncMock) -> None:
        """Проверяет запрос без фильтра."""
        assert await repository.list_active() == []
        assert len(mock_db.fetch.call_args[0]) == 1
