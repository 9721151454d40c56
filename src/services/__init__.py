# src/services/__init__.py
"""
Микросервисы приложения.

Архитектура:
- Каждый сервис — независимое FastAPI-приложение
- PostgreSQL для маршрутов и бронирований
- Коммуникация через RabbitMQ (события)
- Redis для кэширования справочников

Сервисы:
- carpool_service: станции, маршруты водителей, поиск и бронирования
"""

__all__: list[str] = []
