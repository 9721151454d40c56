from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.common.exceptions import MalformedPolylineError
from src.common.logger import log_warning
from src.core.bookings import BookingRequestDTO, BookingService
from src.core.routes import RouteCreateDTO, RouteEstimate, RouteSearchDTO, RouteService
from src.core.stations import StationService
from src.services.carpool_service.dependencies import (
    get_booking_service,
    get_route_service,
    get_station_service,
)
from src.shared.models.carpool_dto import (
    BoardRequest,
    DriverBookingDTO,
    NearestStationDTO,
    RiderBookingDTO,
    RouteCreateResponse,
    RouteEstimateRequest,
    RouteMatchDTO,
    RouteOfferDTO,
    StationDTO,
)
from src.shared.models.common import EntityId

router = APIRouter()

class RouteCreateRequest(RouteCreateDTO):
    driver_id: EntityId

# ---------------------------------------------------------------------------
# Stations
# ---------------------------------------------------------------------------

@router.get("/stations", response_model=list[StationDTO], tags=["Stations"])
async def list_stations(
    city: Optional[str] = None,
    service: StationService = Depends(get_station_service)
):
    stations = await service.list_stations(city)
    return [StationDTO.from_station(s) for s in stations]

@router.get("/stations/nearest", response_model=NearestStationDTO, tags=["Stations"])
async def nearest_station(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    city: Optional[str] = None,
    service: StationService = Depends(get_station_service)
):
    station, distance = await service.nearest_station(lat, lng, city)
    return NearestStationDTO(station=StationDTO.from_station(station), distance_meters=distance)

# ---------------------------------------------------------------------------
# Driver routes
# ---------------------------------------------------------------------------

@router.post("/driver/route/estimate", response_model=RouteEstimate, tags=["Driver"])
async def estimate_route(
    request: RouteEstimateRequest,
    service: RouteService = Depends(get_route_service)
):
    return await service.estimate_route(request.start_station_id, request.end_station_id)

@router.post("/driver/route/create", response_model=RouteCreateResponse, tags=["Driver"])
async def create_route(
    request: RouteCreateRequest,
    service: RouteService = Depends(get_route_service)
):
    dto = RouteCreateDTO(**request.model_dump(exclude={"driver_id"}))
    created = await service.create_route(request.driver_id, dto)
    return RouteCreateResponse.from_created(created)

@router.post("/driver/route/{offer_id}/publish", response_model=RouteOfferDTO, tags=["Driver"])
async def publish_route(
    offer_id: str,
    driver_id: str,
    service: RouteService = Depends(get_route_service)
):
    offer = await service.publish_route(driver_id, offer_id)
    return RouteOfferDTO.from_offer(offer)

@router.get("/driver/routes", response_model=list[RouteOfferDTO], tags=["Driver"])
async def list_driver_routes(
    driver_id: str,
    service: RouteService = Depends(get_route_service)
):
    offers = await service.list_driver_routes(driver_id)

    result = []
    for offer in offers:
        # Битая геометрия одного маршрута не ломает весь список
        try:
            result.append(RouteOfferDTO.from_offer(offer))
        except MalformedPolylineError as e:
            await log_warning(f"Маршрут {offer.id} пропущен: {e.message}")
    return result

# ---------------------------------------------------------------------------
# Rider search & bookings
# ---------------------------------------------------------------------------

@router.post("/rider/route/search", response_model=list[RouteMatchDTO], tags=["Rider"])
async def search_routes(
    request: RouteSearchDTO,
    service: RouteService = Depends(get_route_service)
):
    matches = await service.search_offers(request)
    return [RouteMatchDTO.from_match(m) for m in matches]

@router.post("/rider/booking/request", response_model=RiderBookingDTO, tags=["Rider"])
async def request_booking(
    request: BookingRequestDTO,
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.request_booking(request)
    return RiderBookingDTO.from_booking(booking)

@router.get("/rider/booking", response_model=list[RiderBookingDTO], tags=["Rider"])
async def list_rider_bookings(
    rider_id: str,
    service: BookingService = Depends(get_booking_service)
):
    bookings = await service.list_for_rider(rider_id)
    return [RiderBookingDTO.from_booking(b) for b in bookings]

@router.get("/rider/booking/{booking_id}", response_model=RiderBookingDTO, tags=["Rider"])
async def get_rider_booking(
    booking_id: str,
    rider_id: str,
    service: BookingService = Depends(get_booking_service)
):
    booking = await service.get_for_rider(rider_id, booking_id)
    return RiderBookingDTO.from_booking(booking)

# ---------------------------------------------------------------------------
# Driver bookings
# ---------------------------------------------------------------------------

@router.get("/driver/booking", response_model=list[DriverBookingDTO], tags=["Driver"])
async def list_route_bookings(
    route_offer_id: str,
    service: BookingService = Depends(get_booking_service)
):
    bookings = await service.list_for_route(route_offer_id)
    return [DriverBookingDTO.from_booking(b) for b in bookings]

@router.post("/driver/booking/{booking_id}/accept", response_model=DriverBookingDTO, tags=["Driver"])
async def accept_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service)
):
    return DriverBookingDTO.from_booking(await service.accept(booking_id))

@router.post("/driver/booking/{booking_id}/reject", response_model=DriverBookingDTO, tags=["Driver"])
async def reject_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service)
):
    return DriverBookingDTO.from_booking(await service.reject(booking_id))

@router.post("/driver/booking/{booking_id}/board", response_model=DriverBookingDTO, tags=["Driver"])
async def board_booking(
    booking_id: str,
    request: BoardRequest,
    service: BookingService = Depends(get_booking_service)
):
    return DriverBookingDTO.from_booking(await service.board(booking_id, request.pin_code))

@router.post("/driver/booking/{booking_id}/drop", response_model=DriverBookingDTO, tags=["Driver"])
async def drop_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service)
):
    return DriverBookingDTO.from_booking(await service.drop(booking_id))
