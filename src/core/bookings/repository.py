# src/core/bookings/repository.py
"""
Репозиторий бронирований в БД.
"""

from __future__ import annotations

from typing import Any, Optional

from asyncpg import Connection

from src.common.constants import BookingStatus
from src.common.logger import log_error
from src.core.bookings.models import Booking, BookingCreate
from src.infra.database import DatabaseManager

_COLUMNS = """
    id, route_offer_id, rider_id, seats_requested,
    pickup_station_id, dropoff_station_id, pickup_pos_meters, dropoff_pos_meters,
    price_cents, currency, pin_code, status, created_at
"""


class BookingRepository:
    """Репозиторий бронирований."""

    def __init__(self, db: DatabaseManager) -> None:
        """
        Инициализация репозитория.

        Args:
            db: Менеджер базы данных (Dependency Injection)
        """
        self._db = db

    def _executor(self, conn: Connection | None) -> Any:
        return conn if conn is not None else self._db

    async def create(self, data: BookingCreate) -> Booking:
        """
        Сохраняет новое бронирование в статусе requested.

        Args:
            data: Рассчитанные данные бронирования

        Returns:
            Созданное бронирование
        """
        try:
            row = await self._db.fetchrow(
                f"""
                INSERT INTO bookings (
                    route_offer_id, rider_id, seats_requested,
                    pickup_station_id, dropoff_station_id,
                    pickup_pos_meters, dropoff_pos_meters,
                    price_cents, currency, pin_code, status
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                RETURNING {_COLUMNS}
                """,
                data.route_offer_id,
                data.rider_id,
                data.seats_requested,
                data.pickup_station_id,
                data.dropoff_station_id,
                data.pickup_pos_meters,
                data.dropoff_pos_meters,
                data.price_cents,
                data.currency,
                data.pin_code,
                BookingStatus.REQUESTED.value,
            )
        except Exception as e:
            await log_error(f"Ошибка создания бронирования пассажира {data.rider_id}: {e}")
            raise

        return self._row_to_booking(row)

    async def get_by_id(
        self,
        booking_id: str,
        conn: Connection | None = None,
        for_update: bool = False,
    ) -> Optional[Booking]:
        """
        Получает бронирование по ID.

        Args:
            booking_id: ID бронирования
            conn: Соединение текущей транзакции
            for_update: Заблокировать строку до конца транзакции

        Returns:
            Бронирование или None
        """
        query = f"SELECT {_COLUMNS} FROM bookings WHERE id = $1"
        if for_update:
            query += " FOR UPDATE"

        row = await self._executor(conn).fetchrow(query, booking_id)
        if row is None:
            return None
        return self._row_to_booking(row)

    async def set_status(
        self,
        booking_id: str,
        status: BookingStatus,
        conn: Connection | None = None,
    ) -> Optional[Booking]:
        """Меняет статус бронирования."""
        row = await self._executor(conn).fetchrow(
            f"""
            UPDATE bookings
            SET status = $2
            WHERE id = $1
            RETURNING {_COLUMNS}
            """,
            booking_id,
            status.value,
        )
        if row is None:
            return None
        return self._row_to_booking(row)

    async def list_for_rider(self, rider_id: str) -> list[Booking]:
        """Бронирования пассажира, новые первыми."""
        rows = await self._db.fetch(
            f"""
            SELECT {_COLUMNS}
            FROM bookings
            WHERE rider_id = $1
            ORDER BY created_at DESC
            """,
            rider_id,
        )
        return [self._row_to_booking(row) for row in rows]

    async def list_for_route(self, route_offer_id: str) -> list[Booking]:
        """Бронирования маршрута в порядке посадки."""
        rows = await self._db.fetch(
            f"""
            SELECT {_COLUMNS}
            FROM bookings
            WHERE route_offer_id = $1
            ORDER BY pickup_pos_meters ASC
            """,
            route_offer_id,
        )
        return [self._row_to_booking(row) for row in rows]

    @staticmethod
    def _row_to_booking(row: Any) -> Booking:
        return Booking(
            id=str(row["id"]),
            route_offer_id=str(row["route_offer_id"]),
            rider_id=str(row["rider_id"]),
            seats_requested=row["seats_requested"],
            pickup_station_id=str(row["pickup_station_id"]),
            dropoff_station_id=str(row["dropoff_station_id"]),
            pickup_pos_meters=row["pickup_pos_meters"],
            dropoff_pos_meters=row["dropoff_pos_meters"],
            price_cents=row["price_cents"],
            currency=row["currency"],
            pin_code=str(row["pin_code"]).strip(),
            status=row["status"],
            created_at=row["created_at"],
        )
