# src/core/routes/service.py
"""
Сервис предложений маршрутов.
Оценка и создание маршрута водителем, публикация, поиск для пассажира.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from src.common.constants import RouteOfferStatus, TypeMsg
from src.common.exceptions import RouteOfferNotFoundError
from src.common.logger import log_info
from src.core.geo import build_straight_line_polyline, dump_polyline
from src.core.matching import RouteMatch, RouteMatcher, as_utc
from src.core.routes.models import RouteCreateDTO, RouteEstimate, RouteOffer, RouteSearchDTO
from src.core.routes.repository import RouteOfferRepository
from src.core.stations import StationService
from src.infra.event_bus import DomainEvent, EventBus, EventTypes

if TYPE_CHECKING:
    from src.config.loader import RouteSettings
    from src.core.geo import StraightLineRoute


@dataclass
class CreatedRoute:
    """Созданное предложение и оценка его длины."""
    offer: RouteOffer
    distance_meters: float
    duration_seconds: float


class RouteService:
    """Сервис предложений маршрутов."""

    def __init__(
        self,
        repository: RouteOfferRepository,
        stations: StationService,
        event_bus: EventBus,
        matcher: RouteMatcher | None = None,
        route_settings: RouteSettings | None = None,
        search_window_minutes: int | None = None,
    ) -> None:
        """
        Инициализация сервиса.

        Args:
            repository: Репозиторий предложений
            stations: Сервис станций
            event_bus: Шина событий
            matcher: Матчер кандидатов
            route_settings: Параметры маршрута по прямой (из конфига если None)
            search_window_minutes: Грубое окно поиска (из конфига если None)
        """
        from src.config import settings

        self._repo = repository
        self._stations = stations
        self._event_bus = event_bus
        self._matcher = matcher or RouteMatcher()
        self._route_settings = route_settings or settings.routes
        self._search_window = timedelta(
            minutes=search_window_minutes
            if search_window_minutes is not None
            else settings.matching.SEARCH_WINDOW_MINUTES
        )

    async def _straight_line(self, start_station_id: str, end_station_id: str) -> StraightLineRoute:
        start = await self._stations.get_station(start_station_id)
        end = await self._stations.get_station(end_station_id)

        return build_straight_line_polyline(
            start.point,
            end.point,
            segments=self._route_settings.STRAIGHT_LINE_SEGMENTS,
            road_factor=self._route_settings.ROAD_FACTOR,
            avg_speed_kmh=self._route_settings.AVG_SPEED_KMH,
        )

    # =========================================================================
    # ВОДИТЕЛЬ
    # =========================================================================

    async def estimate_route(self, start_station_id: str, end_station_id: str) -> RouteEstimate:
        """
        Оценивает маршрут по прямой между станциями.

        Raises:
            StationNotFoundError: одной из станций нет
        """
        route = await self._straight_line(start_station_id, end_station_id)
        return RouteEstimate(
            distance_meters=route.distance_meters,
            duration_seconds=route.duration_seconds,
            polyline_points=[p.to_dict() for p in route.points],
        )

    async def create_route(self, driver_id: str, dto: RouteCreateDTO) -> CreatedRoute:
        """
        Создаёт черновик предложения маршрута.

        Геометрия строится по прямой между станциями и сохраняется
        единственным JSON-полем.

        Args:
            driver_id: ID водителя
            dto: Данные маршрута

        Returns:
            Предложение, длина и длительность маршрута
        """
        route = await self._straight_line(dto.start_station_id, dto.end_station_id)

        offer = await self._repo.create(driver_id, dto, dump_polyline(route.points))

        await log_info(
            f"Маршрут {offer.id} создан водителем {driver_id}",
            type_msg=TypeMsg.INFO,
        )
        await self._event_bus.publish(DomainEvent(
            event_type=EventTypes.ROUTE_OFFER_CREATED,
            payload={
                "route_offer_id": offer.id,
                "driver_id": driver_id,
                "departure_time": offer.departure_time.isoformat(),
                "capacity_total": offer.capacity_total,
            },
        ))

        return CreatedRoute(
            offer=offer,
            distance_meters=route.distance_meters,
            duration_seconds=route.duration_seconds,
        )

    async def publish_route(self, driver_id: str, offer_id: str) -> RouteOffer:
        """
        Публикует предложение. Доступно только владельцу.

        Raises:
            RouteOfferNotFoundError: предложения нет или оно чужое
        """
        offer = await self._repo.get_by_id(offer_id)
        if offer is None or offer.driver_id != driver_id:
            raise RouteOfferNotFoundError(f"Маршрут {offer_id} не найден", route_offer_id=offer_id)

        if offer.is_published:
            return offer

        published = await self._repo.set_status(offer_id, RouteOfferStatus.PUBLISHED)
        if published is None:
            raise RouteOfferNotFoundError(f"Маршрут {offer_id} не найден", route_offer_id=offer_id)

        await log_info(f"Маршрут {offer_id} опубликован", type_msg=TypeMsg.INFO)
        await self._event_bus.publish(DomainEvent(
            event_type=EventTypes.ROUTE_OFFER_PUBLISHED,
            payload={"route_offer_id": offer_id, "driver_id": driver_id},
        ))

        return published

    async def list_driver_routes(self, driver_id: str) -> list[RouteOffer]:
        """Предложения водителя, новые первыми."""
        return await self._repo.list_for_driver(driver_id)

    # =========================================================================
    # ПАССАЖИР
    # =========================================================================

    async def search_offers(self, dto: RouteSearchDTO) -> list[RouteMatch]:
        """
        Ищет предложения, проходящие рядом с обеими станциями.

        Args:
            dto: Станции, желаемое время и количество мест

        Returns:
            Совпадения в порядке выдачи хранилища

        Raises:
            StationNotFoundError: одной из станций нет
        """
        pickup = await self._stations.get_station(dto.pickup_station_id)
        dropoff = await self._stations.get_station(dto.dropoff_station_id)

        desired = as_utc(dto.desired_time)
        candidates = await self._repo.find_published_candidates(
            seats=dto.seats,
            window_start=desired - self._search_window,
            window_end=desired + self._search_window,
        )

        matches = self._matcher.match(
            pickup=pickup.point,
            dropoff=dropoff.point,
            desired_time=desired,
            seats=dto.seats,
            candidates=candidates,
        )

        await log_info(
            f"Поиск {dto.pickup_station_id} -> {dto.dropoff_station_id}: "
            f"{len(matches)} из {len(candidates)} кандидатов",
            type_msg=TypeMsg.DEBUG,
        )
        return matches
