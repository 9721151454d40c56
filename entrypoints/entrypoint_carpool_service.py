#!/usr/bin/env python3
# entrypoint_carpool_service.py
"""
Точка входа для Carpool Service.
Порт: CARPOOL_SERVICE_PORT (8092 по умолчанию)
"""

import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings
from src.common.logger import log_info, setup_logging
from src.common.constants import TypeMsg


async def main() -> None:
    """Запуск Carpool Service."""
    setup_logging()
    await log_info(
        f"Запуск Carpool Service на порту {settings.deployment.CARPOOL_SERVICE_PORT}",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "src.services.carpool_service.app:app",
        host=settings.deployment.CARPOOL_SERVICE_HOST,
        port=settings.deployment.CARPOOL_SERVICE_PORT,
        reload=settings.system.DEBUG,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
