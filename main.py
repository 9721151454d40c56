#!/usr/bin/env python3
# main.py
"""
Главная точка входа карпул-сервиса.

Режимы:
    carpool_service  — HTTP API (по умолчанию)
    migrate          — применить migrations/init.sql и выйти
"""

from __future__ import annotations

import asyncio
import signal
import sys

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import TypeMsg
from src.infra.database import init_db, close_db


# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []

VALID_MODES = ("carpool_service", "migrate")


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


async def run_carpool_service() -> None:
    """Запускает Carpool Service. Инфраструктура поднимается в lifespan приложения."""
    import uvicorn

    await log_info(
        f"Запуск Carpool Service на порту {settings.deployment.CARPOOL_SERVICE_PORT}...",
        type_msg=TypeMsg.INFO
    )

    config = uvicorn.Config(
        "src.services.carpool_service.app:app",
        host=settings.deployment.CARPOOL_SERVICE_HOST,
        port=settings.deployment.CARPOOL_SERVICE_PORT,
        reload=settings.system.DEBUG,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("Carpool Service: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def run_migrate() -> None:
    """Применяет схему БД и закрывает соединение."""
    try:
        await init_db()
    finally:
        await close_db()


async def main(mode: str = "carpool_service") -> None:
    """
    Главная функция запуска.

    Args:
        mode: Режим запуска (carpool_service, migrate)
    """
    setup_logging()
    setup_signal_handlers()

    await log_info(
        f"Carpool v{settings.system.VERSION} — запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO
    )

    if mode == "carpool_service":
        task = asyncio.create_task(run_carpool_service())
    elif mode == "migrate":
        task = asyncio.create_task(run_migrate())
    else:
        await log_error(f"Неизвестный режим '{mode}', доступны: {', '.join(VALID_MODES)}")
        sys.exit(2)

    _running_tasks.append(task)
    try:
        await task
    except asyncio.CancelledError:
        await log_info("Остановка по сигналу", type_msg=TypeMsg.INFO)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "carpool_service"))
