# src/core/stations/repository.py
"""
Репозиторий станций.
Станции неизменяемы, поэтому строки кэшируются в Redis.
"""

from __future__ import annotations

from typing import Any, Optional

from redis.exceptions import RedisError

from src.common.logger import log_error, log_warning
from src.core.stations.models import Station
from src.infra.database import DatabaseManager
from src.infra.redis_client import RedisClient


class StationRepository:
    """Репозиторий станций."""

    def __init__(
        self,
        db: DatabaseManager,
        redis: RedisClient | None = None,
        cache_ttl: int | None = None,
    ) -> None:
        """
        Инициализация репозитория.

        Args:
            db: Менеджер базы данных (Dependency Injection)
            redis: Клиент Redis для кэша (без кэша если None)
            cache_ttl: TTL записи кэша в секундах
        """
        self._db = db
        self._redis = redis

        if cache_ttl is None:
            from src.config import settings
            cache_ttl = settings.redis_ttl.STATION_TTL
        self._cache_ttl = cache_ttl

    @staticmethod
    def _cache_key(station_id: str) -> str:
        return f"station:{station_id}"

    async def get_by_id(self, station_id: str) -> Optional[Station]:
        """
        Получает станцию по ID, сначала из кэша.

        Args:
            station_id: ID станции

        Returns:
            Станция или None
        """
        cached = await self._cache_get(station_id)
        if cached is not None:
            return cached

        try:
            row = await self._db.fetchrow(
                """
                SELECT id, name, city, lat, lng, active
                FROM stations
                WHERE id = $1
                """,
                station_id,
            )
        except Exception as e:
            await log_error(f"Ошибка получения станции {station_id}: {e}")
            raise

        if row is None:
            return None

        station = self._row_to_station(row)
        await self._cache_set(station)
        return station

    async def list_active(self, city: str | None = None) -> list[Station]:
        """
        Активные станции по имени.

        Args:
            city: Фильтр по городу

        Returns:
            Список станций
        """
        try:
            if city:
                rows = await self._db.fetch(
                    """
                    SELECT id, name, city, lat, lng, active
                    FROM stations
                    WHERE active = TRUE AND city = $1
                    ORDER BY name ASC
                    """,
                    city,
                )
            else:
                rows = await self._db.fetch(
                    """
                    SELECT id, name, city, lat, lng, active
                    FROM stations
                    WHERE active = TRUE
                    ORDER BY name ASC
                    """
                )
        except Exception as e:
            await log_error(f"Ошибка получения списка станций: {e}")
            raise

        return [self._row_to_station(row) for row in rows]

    async def _cache_get(self, station_id: str) -> Optional[Station]:
        if self._redis is None or not self._redis.is_connected:
            return None
        try:
            return await self._redis.get_model(self._cache_key(station_id), Station)
        except RedisError as e:
            await log_warning(f"Кэш станций недоступен: {e}")
            return None

    async def _cache_set(self, station: Station) -> None:
        if self._redis is None or not self._redis.is_connected:
            return
        try:
            await self._redis.set_model(self._cache_key(station.id), station, ttl=self._cache_ttl)
        except RedisError as e:
            await log_warning(f"Не удалось закэшировать станцию {station.id}: {e}")

    @staticmethod
    def _row_to_station(row: Any) -> Station:
        return Station(
            id=str(row["id"]),
            name=row["name"],
            city=row["city"],
            latitude=row["lat"],
            longitude=row["lng"],
            active=row["active"],
        )
