# src/core/bookings/service.py
"""
Сервис бронирований.

Создание бронирования с расчётом сегмента и жизненный цикл:
requested -> accepted -> boarded -> dropped, requested|offered -> rejected.
Места списываются только при accept, в одной транзакции со сменой статуса.
"""

from __future__ import annotations

import secrets
from typing import Any, Callable, TYPE_CHECKING

from src.common.constants import BookingStatus, TypeMsg
from src.common.exceptions import (
    BookingNotFoundError,
    InsufficientCapacityError,
    InvalidPinError,
    InvalidStateTransitionError,
    RouteOfferNotFoundError,
)
from src.common.logger import log_info
from src.core.bookings.models import Booking, BookingCreate, BookingRequestDTO
from src.core.bookings.repository import BookingRepository
from src.core.bookings.state_machine import BookingStateMachine
from src.core.pricing import SegmentPricer
from src.core.routes.repository import RouteOfferRepository
from src.core.stations import StationService
from src.infra.database import DatabaseManager
from src.infra.event_bus import DomainEvent, EventBus, EventTypes

if TYPE_CHECKING:
    from src.config.loader import BookingSettings


def make_pin_generator(pin_min: int = 1000, pin_max: int = 9999) -> Callable[[], str]:
    """Генератор 4-значных PIN-кодов в [pin_min, pin_max]."""
    def generate() -> str:
        return str(pin_min + secrets.randbelow(pin_max - pin_min + 1))
    return generate


class BookingService:
    """Сервис бронирований."""

    def __init__(
        self,
        db: DatabaseManager,
        repository: BookingRepository,
        routes: RouteOfferRepository,
        stations: StationService,
        event_bus: EventBus,
        pricer: SegmentPricer | None = None,
        pin_generator: Callable[[], str] | None = None,
        booking_settings: BookingSettings | None = None,
    ) -> None:
        """
        Инициализация сервиса.

        Args:
            db: Менеджер БД (нужен для транзакции accept)
            repository: Репозиторий бронирований
            routes: Репозиторий предложений маршрутов
            stations: Сервис станций
            event_bus: Шина событий
            pricer: Калькулятор сегмента
            pin_generator: Генератор PIN-кодов
            booking_settings: Диапазон PIN (из конфига если None)
        """
        self._db = db
        self._repo = repository
        self._routes = routes
        self._stations = stations
        self._event_bus = event_bus
        self._pricer = pricer or SegmentPricer()

        if pin_generator is None:
            if booking_settings is None:
                from src.config import settings
                booking_settings = settings.bookings
            pin_generator = make_pin_generator(booking_settings.PIN_MIN, booking_settings.PIN_MAX)
        self._generate_pin = pin_generator

    async def _publish(self, event_type: str, booking: Booking, **extra: Any) -> None:
        await self._event_bus.publish(DomainEvent(
            event_type=event_type,
            payload={
                "booking_id": booking.id,
                "route_offer_id": booking.route_offer_id,
                "rider_id": booking.rider_id,
                "seats": booking.seats_requested,
                "status": booking.status.value,
                **extra,
            },
        ))

    # =========================================================================
    # СОЗДАНИЕ
    # =========================================================================

    async def request_booking(self, dto: BookingRequestDTO) -> Booking:
        """
        Создаёт бронирование в статусе requested.

        Места не резервируются: наличие проверяется заранее,
        списание происходит при accept.

        Args:
            dto: Запрос пассажира

        Returns:
            Созданное бронирование с ценой и PIN-кодом

        Raises:
            RouteOfferNotFoundError: предложения нет
            StationNotFoundError: одной из станций нет
            InvalidStateTransitionError: предложение не опубликовано
            InsufficientCapacityError: мест не хватает
            InvalidSegmentOrderError: посадка не раньше высадки
        """
        offer = await self._routes.get_by_id(dto.route_offer_id)
        if offer is None:
            raise RouteOfferNotFoundError(
                f"Маршрут {dto.route_offer_id} не найден",
                route_offer_id=dto.route_offer_id,
            )

        pickup = await self._stations.get_station(dto.pickup_station_id)
        dropoff = await self._stations.get_station(dto.dropoff_station_id)

        if not offer.is_published:
            raise InvalidStateTransitionError(
                f"Маршрут {offer.id} не опубликован",
                route_offer_id=offer.id,
                status=offer.status.value,
            )

        if offer.capacity_available < dto.seats:
            raise InsufficientCapacityError(
                "Недостаточно свободных мест",
                available=offer.capacity_available,
                requested=dto.seats,
            )

        segment = self._pricer.price_segment(offer.points(), pickup.point, dropoff.point)

        booking = await self._repo.create(BookingCreate(
            route_offer_id=offer.id,
            rider_id=dto.rider_id,
            seats_requested=dto.seats,
            pickup_station_id=pickup.id,
            dropoff_station_id=dropoff.id,
            pickup_pos_meters=segment.pickup_pos_meters,
            dropoff_pos_meters=segment.dropoff_pos_meters,
            price_cents=segment.price_cents,
            currency=dto.currency or self._pricer.currency,
            pin_code=self._generate_pin(),
        ))

        await log_info(
            f"Бронирование {booking.id} создано: маршрут {offer.id}, "
            f"{booking.seats_requested} мест, {booking.price_cents} {booking.currency}",
            type_msg=TypeMsg.INFO,
        )
        await self._publish(EventTypes.BOOKING_REQUESTED, booking, price_cents=booking.price_cents)

        return booking

    # =========================================================================
    # ЧТЕНИЕ
    # =========================================================================

    async def list_for_rider(self, rider_id: str) -> list[Booking]:
        return await self._repo.list_for_rider(rider_id)

    async def get_for_rider(self, rider_id: str, booking_id: str) -> Booking:
        """
        Бронирование пассажира.

        Raises:
            BookingNotFoundError: бронирования нет или оно чужое
        """
        booking = await self._repo.get_by_id(booking_id)
        if booking is None or booking.rider_id != rider_id:
            raise BookingNotFoundError(f"Бронирование {booking_id} не найдено", booking_id=booking_id)
        return booking

    async def list_for_route(self, route_offer_id: str) -> list[Booking]:
        """Бронирования маршрута в порядке посадки."""
        return await self._repo.list_for_route(route_offer_id)

    # =========================================================================
    # ЖИЗНЕННЫЙ ЦИКЛ
    # =========================================================================

    async def accept(self, booking_id: str) -> Booking:
        """
        Принимает бронирование и списывает места.

        Проверка мест, списание и смена статуса выполняются в одной
        транзакции. Строка бронирования блокируется, списание идёт
        условным UPDATE, поэтому параллельные accept не перебронируют
        предложение.

        Raises:
            BookingNotFoundError: бронирования нет
            InvalidStateTransitionError: статус не requested
            RouteOfferNotFoundError: предложения нет
            InsufficientCapacityError: мест не хватает
        """
        async with self._db.transaction() as conn:
            booking = await self._repo.get_by_id(booking_id, conn=conn, for_update=True)
            if booking is None:
                raise BookingNotFoundError(f"Бронирование {booking_id} не найдено", booking_id=booking_id)

            BookingStateMachine.ensure_transition(booking.status, BookingStatus.ACCEPTED)

            offer = await self._routes.get_by_id(booking.route_offer_id, conn=conn)
            if offer is None:
                raise RouteOfferNotFoundError(
                    f"Маршрут {booking.route_offer_id} не найден",
                    route_offer_id=booking.route_offer_id,
                )

            if offer.capacity_available < booking.seats_requested:
                raise InsufficientCapacityError(
                    "Недостаточно свободных мест",
                    available=offer.capacity_available,
                    requested=booking.seats_requested,
                )

            reserved = await self._routes.try_reserve(offer.id, booking.seats_requested, conn=conn)
            if not reserved:
                raise InsufficientCapacityError(
                    "Недостаточно свободных мест",
                    requested=booking.seats_requested,
                )

            accepted = await self._repo.set_status(booking_id, BookingStatus.ACCEPTED, conn=conn)
            if accepted is None:
                raise BookingNotFoundError(f"Бронирование {booking_id} не найдено", booking_id=booking_id)

        await log_info(
            f"Бронирование {booking_id} принято, списано мест: {accepted.seats_requested}",
            type_msg=TypeMsg.INFO,
        )
        await self._publish(EventTypes.BOOKING_ACCEPTED, accepted)
        return accepted

    async def reject(self, booking_id: str) -> Booking:
        """Отклоняет бронирование. Места не трогаются."""
        rejected = await self._transition(booking_id, BookingStatus.REJECTED)
        await self._publish(EventTypes.BOOKING_REJECTED, rejected)
        return rejected

    async def board(self, booking_id: str, pin_code: str) -> Booking:
        """
        Отмечает посадку пассажира по PIN-коду.

        Raises:
            InvalidStateTransitionError: статус не accepted
            InvalidPinError: PIN не совпал, статус не меняется
        """
        def check_pin(booking: Booking) -> None:
            candidate = str(pin_code)
            # Сравнение точное, без trim. compare_digest принимает только ASCII-строки
            if not candidate.isascii() or not secrets.compare_digest(candidate, booking.pin_code):
                raise InvalidPinError("Неверный PIN-код", booking_id=booking.id)

        boarded = await self._transition(booking_id, BookingStatus.BOARDED, guard=check_pin)
        await self._publish(EventTypes.BOOKING_BOARDED, boarded)
        return boarded

    async def drop(self, booking_id: str) -> Booking:
        """Отмечает высадку пассажира."""
        dropped = await self._transition(booking_id, BookingStatus.DROPPED)
        await self._publish(EventTypes.BOOKING_DROPPED, dropped)
        return dropped

    async def _transition(
        self,
        booking_id: str,
        new_status: BookingStatus,
        guard: Callable[[Booking], None] | None = None,
    ) -> Booking:
        async with self._db.transaction() as conn:
            booking = await self._repo.get_by_id(booking_id, conn=conn, for_update=True)
            if booking is None:
                raise BookingNotFoundError(f"Бронирование {booking_id} не найдено", booking_id=booking_id)

            BookingStateMachine.ensure_transition(booking.status, new_status)
            if guard is not None:
                guard(booking)

            updated = await self._repo.set_status(booking_id, new_status, conn=conn)
            if updated is None:
                raise BookingNotFoundError(f"Бронирование {booking_id} не найдено", booking_id=booking_id)

        await log_info(
            f"Бронирование {booking_id}: {booking.status.value} -> {new_status.value}",
            type_msg=TypeMsg.INFO,
        )
        return updated
