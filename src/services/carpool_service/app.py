from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.common.constants import TypeMsg
from src.common.exceptions import CarpoolError
from src.common.logger import log_info
from src.config import settings
from src.infra.database import close_db, get_db, init_db
from src.infra.event_bus import close_event_bus, get_event_bus, init_event_bus
from src.infra.redis_client import close_redis, get_redis, init_redis
from src.services.carpool_service.routes import router
from src.shared.models.common import ErrorResponse, HealthStatus

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await log_info("Starting Carpool Service...", type_msg=TypeMsg.INFO)
    await init_db()
    await init_redis()
    await init_event_bus()
    yield
    # Shutdown
    await log_info("Shutting down Carpool Service...", type_msg=TypeMsg.INFO)
    await close_event_bus()
    await close_redis()
    await close_db()

app = FastAPI(
    title="Carpool Service",
    description="Route offers, route search and seat bookings between stations",
    version=settings.system.VERSION,
    lifespan=lifespan
)

app.include_router(router, prefix="/api/v1")

@app.exception_handler(CarpoolError)
async def carpool_error_handler(request: Request, exc: CarpoolError):
    await log_info(
        f"{request.method} {request.url.path}: {exc.error_code} ({exc.message})",
        type_msg=TypeMsg.WARNING,
    )
    body = ErrorResponse(
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details or None,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))

@app.get("/health", response_model=HealthStatus)
async def health_check():
    redis = get_redis()
    dependencies = {
        "postgres": "healthy" if await get_db().health_check() else "unhealthy",
        "redis": "healthy" if redis.is_connected and await redis.health_check() else "unhealthy",
        "rabbitmq": "healthy" if get_event_bus().is_connected else "unhealthy",
    }
    status = "healthy" if all(v == "healthy" for v in dependencies.values()) else "degraded"
    return HealthStatus(
        service="carpool_service",
        status=status,
        version=settings.system.VERSION,
        dependencies=dependencies,
    )
