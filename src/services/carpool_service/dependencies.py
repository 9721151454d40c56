from fastapi import Request
from src.core.bookings import BookingRepository, BookingService
from src.core.routes import RouteOfferRepository, RouteService
from src.core.stations import StationRepository, StationService
from src.infra.database import get_db
from src.infra.event_bus import get_event_bus
from src.infra.redis_client import get_redis

def get_station_service(request: Request) -> StationService:
    repository = StationRepository(get_db(), get_redis())
    return StationService(repository)

def get_route_service(request: Request) -> RouteService:
    return RouteService(
        RouteOfferRepository(get_db()),
        get_station_service(request),
        get_event_bus(),
    )

def get_booking_service(request: Request) -> BookingService:
    db = get_db()
    return BookingService(
        db,
        BookingRepository(db),
        RouteOfferRepository(db),
        get_station_service(request),
        get_event_bus(),
    )
