# src/core/routes/repository.py
"""
Репозиторий предложений маршрутов в БД.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from asyncpg import Connection

from src.common.constants import RouteOfferStatus
from src.common.logger import log_error
from src.core.routes.models import RouteCreateDTO, RouteOffer
from src.infra.database import DatabaseManager

_COLUMNS = """
    id, driver_id, start_station_id, end_station_id, polyline,
    departure_time, flex_minutes, capacity_total, capacity_available,
    max_detour_minutes, pickup_mode, status, created_at
"""


class RouteOfferRepository:
    """
    Репозиторий предложений маршрутов.

    Методы, участвующие в транзакции, принимают необязательное соединение conn;
    без него запрос идёт через пул.
    """

    def __init__(self, db: DatabaseManager) -> None:
        """
        Инициализация репозитория.

        Args:
            db: Менеджер базы данных (Dependency Injection)
        """
        self._db = db

    def _executor(self, conn: Connection | None) -> Any:
        return conn if conn is not None else self._db

    async def create(
        self,
        driver_id: str,
        dto: RouteCreateDTO,
        polyline: str,
    ) -> RouteOffer:
        """
        Создаёт черновик предложения. Все места свободны.

        Args:
            driver_id: ID водителя
            dto: Данные маршрута
            polyline: Геометрия маршрута (JSON)

        Returns:
            Созданное предложение
        """
        try:
            row = await self._db.fetchrow(
                f"""
                INSERT INTO route_offers (
                    driver_id, start_station_id, end_station_id, polyline,
                    departure_time, flex_minutes, capacity_total, capacity_available,
                    max_detour_minutes, pickup_mode, status
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $7, $8, $9, $10)
                RETURNING {_COLUMNS}
                """,
                driver_id,
                dto.start_station_id,
                dto.end_station_id,
                polyline,
                dto.departure_time,
                dto.flex_minutes,
                dto.capacity_total,
                dto.max_detour_minutes,
                dto.pickup_mode.value,
                RouteOfferStatus.DRAFT.value,
            )
        except Exception as e:
            await log_error(f"Ошибка создания маршрута водителя {driver_id}: {e}")
            raise

        return self._row_to_offer(row)

    async def get_by_id(
        self,
        offer_id: str,
        conn: Connection | None = None,
    ) -> Optional[RouteOffer]:
        """
        Получает предложение по ID.

        Args:
            offer_id: ID предложения
            conn: Соединение текущей транзакции

        Returns:
            Предложение или None
        """
        row = await self._executor(conn).fetchrow(
            f"SELECT {_COLUMNS} FROM route_offers WHERE id = $1",
            offer_id,
        )
        if row is None:
            return None
        return self._row_to_offer(row)

    async def set_status(self, offer_id: str, status: RouteOfferStatus) -> Optional[RouteOffer]:
        """Меняет статус предложения."""
        row = await self._db.fetchrow(
            f"""
            UPDATE route_offers
            SET status = $2
            WHERE id = $1
            RETURNING {_COLUMNS}
            """,
            offer_id,
            status.value,
        )
        if row is None:
            return None
        return self._row_to_offer(row)

    async def list_for_driver(self, driver_id: str) -> list[RouteOffer]:
        """Предложения водителя, новые первыми."""
        rows = await self._db.fetch(
            f"""
            SELECT {_COLUMNS}
            FROM route_offers
            WHERE driver_id = $1
            ORDER BY created_at DESC
            """,
            driver_id,
        )
        return [self._row_to_offer(row) for row in rows]

    async def find_published_candidates(
        self,
        seats: int,
        window_start: datetime,
        window_end: datetime,
    ) -> list[RouteOffer]:
        """
        Грубый отбор кандидатов для матчинга.

        Args:
            seats: Минимум свободных мест
            window_start: Начало окна отправления
            window_end: Конец окна отправления

        Returns:
            Опубликованные предложения, без блокировок
        """
        rows = await self._db.fetch(
            f"""
            SELECT {_COLUMNS}
            FROM route_offers
            WHERE status = $1
              AND capacity_available >= $2
              AND departure_time BETWEEN $3 AND $4
            ORDER BY departure_time ASC
            """,
            RouteOfferStatus.PUBLISHED.value,
            seats,
            window_start,
            window_end,
        )
        return [self._row_to_offer(row) for row in rows]

    async def try_reserve(
        self,
        offer_id: str,
        seats: int,
        conn: Connection | None = None,
    ) -> bool:
        """
        Атомарно списывает места, если их хватает.

        Условный UPDATE берёт блокировку строки, поэтому два параллельных
        списания не увидят одно и то же значение capacity_available.

        Returns:
            True если места списаны
        """
        reserved = await self._executor(conn).fetchval(
            """
            UPDATE route_offers
            SET capacity_available = capacity_available - $2
            WHERE id = $1 AND capacity_available >= $2
            RETURNING capacity_available
            """,
            offer_id,
            seats,
        )
        return reserved is not None

    @staticmethod
    def _row_to_offer(row: Any) -> RouteOffer:
        return RouteOffer(
            id=str(row["id"]),
            driver_id=str(row["driver_id"]),
            start_station_id=str(row["start_station_id"]),
            end_station_id=str(row["end_station_id"]),
            polyline=row["polyline"],
            departure_time=row["departure_time"],
            flex_minutes=row["flex_minutes"],
            capacity_total=row["capacity_total"],
            capacity_available=row["capacity_available"],
            max_detour_minutes=row["max_detour_minutes"],
            pickup_mode=row["pickup_mode"],
            status=row["status"],
            created_at=row["created_at"],
        )
