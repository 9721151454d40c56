# src/shared/models/common.py
"""
Общие модели для всех сервисов.
"""

from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field


def parse_entity_id(value: Any) -> str:
    """
    Приводит идентификатор сущности к строке.

    Клиенты присылают ID станций и маршрутов то строкой, то числом,
    внутри сервиса это всегда str.

    Raises:
        ValueError: пустое значение, bool, дробное число или не скаляр
    """
    if isinstance(value, bool):
        raise ValueError("Идентификатор не может быть bool")

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValueError(f"Некорректный числовой идентификатор: {value}")
        return str(int(value))

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("Идентификатор не может быть пустым")
        return stripped

    raise ValueError(f"Некорректный тип идентификатора: {type(value).__name__}")


EntityId = Annotated[str, BeforeValidator(parse_entity_id)]


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой."""

    error_code: str
    message: str
    details: dict[str, Any] | None = None
    request_id: str | None = None


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "healthy"  # healthy, degraded, unhealthy
    version: str | None = None
    uptime_seconds: float | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    # dependencies: {"postgres": "healthy", "redis": "healthy", "rabbitmq": "healthy"}
