# src/shared/__init__.py
"""
Общий код HTTP-слоя.

Модули:
- models: общие DTO и Pydantic-модели (ошибки, health, станции, маршруты, бронирования)
"""

__all__: list[str] = []
