# tests/fakes.py
"""
In-memory замены репозиториев и менеджера БД для тестов сервисов.

FakeDatabase.transaction() откатывает изменения, сделанные репозиториями
внутри транзакции, если блок завершился исключением. Параллельные
транзакции (asyncio.gather) ведут независимые журналы отката.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Callable, Optional

from src.common.constants import BookingStatus, RouteOfferStatus
from src.core.bookings.models import Booking, BookingCreate
from src.core.routes.models import RouteCreateDTO, RouteOffer
from src.core.stations.models import Station

_undo_log: ContextVar[Optional[list[Callable[[], None]]]] = ContextVar("fake_undo_log", default=None)

_CLOCK_START = datetime(2026, 1, 1, tzinfo=timezone.utc)

# Время отправления тестовых маршрутов
DEPARTURE = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)

# Маршрут вдоль экватора: 0° -> 1° -> 2° долготы
EQUATOR_POLYLINE = json.dumps([
    {"lat": 0.0, "lng": 0.0},
    {"lat": 0.0, "lng": 1.0},
    {"lat": 0.0, "lng": 2.0},
])


def _register_undo(action: Callable[[], None]) -> None:
    journal = _undo_log.get()
    if journal is not None:
        journal.append(action)


class FakeDatabase:
    """Менеджер БД с транзакциями поверх in-memory репозиториев."""

    def __init__(self) -> None:
        self.committed = 0
        self.rolled_back = 0

    @asynccontextmanager
    async def transaction(self, isolation: str = "read_committed") -> AsyncIterator[object]:
        journal: list[Callable[[], None]] = []
        token = _undo_log.set(journal)
        try:
            yield object()
        except BaseException:
            for action in reversed(journal):
                action()
            self.rolled_back += 1
            raise
        else:
            self.committed += 1
        finally:
            _undo_log.reset(token)


class FakeStationRepository:
    """Справочник станций."""

    def __init__(self, stations: list[Station] | None = None) -> None:
        self.stations: dict[str, Station] = {s.id: s for s in stations or []}

    async def get_by_id(self, station_id: str) -> Optional[Station]:
        return self.stations.get(station_id)

    async def list_active(self, city: str | None = None) -> list[Station]:
        stations = [
            s for s in self.stations.values()
            if s.active and (not city or s.city == city)
        ]
        return sorted(stations, key=lambda s: s.name)


class FakeRouteOfferRepository:
    """Предложения маршрутов."""

    def __init__(self) -> None:
        self.offers: dict[str, RouteOffer] = {}
        self._tick = 0

    def _now(self) -> datetime:
        self._tick += 1
        return _CLOCK_START + timedelta(seconds=self._tick)

    def add(self, **fields: Any) -> RouteOffer:
        """Кладёт предложение напрямую, минуя create()."""
        fields.setdefault("id", str(uuid.uuid4()))
        fields.setdefault("created_at", self._now())
        fields.setdefault("capacity_available", fields.get("capacity_total"))
        offer = RouteOffer(**fields)
        self.offers[offer.id] = offer
        return offer

    async def create(self, driver_id: str, dto: RouteCreateDTO, polyline: str) -> RouteOffer:
        return self.add(
            driver_id=driver_id,
            start_station_id=dto.start_station_id,
            end_station_id=dto.end_station_id,
            polyline=polyline,
            departure_time=dto.departure_time,
            flex_minutes=dto.flex_minutes,
            capacity_total=dto.capacity_total,
            max_detour_minutes=dto.max_detour_minutes,
            pickup_mode=dto.pickup_mode,
            status=RouteOfferStatus.DRAFT,
        )

    async def get_by_id(self, offer_id: str, conn: Any = None) -> Optional[RouteOffer]:
        # Точка переключения: параллельные транзакции успевают прочитать
        # одно и то же значение capacity_available
        await asyncio.sleep(0)
        return self.offers.get(offer_id)

    async def set_status(self, offer_id: str, status: RouteOfferStatus) -> Optional[RouteOffer]:
        offer = self.offers.get(offer_id)
        if offer is None:
            return None
        self.offers[offer_id] = offer.model_copy(update={"status": status})
        return self.offers[offer_id]

    async def list_for_driver(self, driver_id: str) -> list[RouteOffer]:
        offers = [o for o in self.offers.values() if o.driver_id == driver_id]
        return sorted(offers, key=lambda o: o.created_at, reverse=True)

    async def find_published_candidates(
        self,
        seats: int,
        window_start: datetime,
        window_end: datetime,
    ) -> list[RouteOffer]:
        offers = [
            o for o in self.offers.values()
            if o.status == RouteOfferStatus.PUBLISHED
            and o.capacity_available >= seats
            and window_start <= o.departure_time <= window_end
        ]
        return sorted(offers, key=lambda o: o.departure_time)

    async def try_reserve(self, offer_id: str, seats: int, conn: Any = None) -> bool:
        # Проверка и списание без точек переключения, как условный UPDATE
        offer = self.offers.get(offer_id)
        if offer is None or offer.capacity_available < seats:
            return False

        self.offers[offer_id] = offer.model_copy(
            update={"capacity_available": offer.capacity_available - seats}
        )

        def release() -> None:
            current = self.offers[offer_id]
            self.offers[offer_id] = current.model_copy(
                update={"capacity_available": current.capacity_available + seats}
            )

        _register_undo(release)
        return True


class FakeBookingRepository:
    """Бронирования."""

    def __init__(self) -> None:
        self.bookings: dict[str, Booking] = {}
        self._tick = 0

    def _now(self) -> datetime:
        self._tick += 1
        return _CLOCK_START + timedelta(seconds=self._tick)

    def add(self, **fields: Any) -> Booking:
        """Кладёт бронирование напрямую, минуя create()."""
        fields.setdefault("id", str(uuid.uuid4()))
        fields.setdefault("created_at", self._now())
        booking = Booking(**fields)
        self.bookings[booking.id] = booking
        return booking

    async def create(self, data: BookingCreate) -> Booking:
        return self.add(**data.model_dump(), status=BookingStatus.REQUESTED)

    async def get_by_id(
        self,
        booking_id: str,
        conn: Any = None,
        for_update: bool = False,
    ) -> Optional[Booking]:
        return self.bookings.get(booking_id)

    async def set_status(
        self,
        booking_id: str,
        status: BookingStatus,
        conn: Any = None,
    ) -> Optional[Booking]:
        booking = self.bookings.get(booking_id)
        if booking is None:
            return None
        self.bookings[booking_id] = booking.model_copy(update={"status": status})

        def restore() -> None:
            self.bookings[booking_id] = booking

        _register_undo(restore)
        return self.bookings[booking_id]

    async def list_for_rider(self, rider_id: str) -> list[Booking]:
        bookings = [b for b in self.bookings.values() if b.rider_id == rider_id]
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)

    async def list_for_route(self, route_offer_id: str) -> list[Booking]:
        bookings = [b for b in self.bookings.values() if b.route_offer_id == route_offer_id]
        return sorted(bookings, key=lambda b: b.pickup_pos_meters)
