# tests/infra/test_redis_client.py
"""
Тесты для клиента Redis.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from src.core.stations import Station
from src.infra.redis_client import RedisClient


class TestRedisClient:
    """Тесты для RedisClient."""

    @pytest.fixture
    def redis_client(self) -> RedisClient:
        """Создаёт экземпляр RedisClient для тестов."""
        # Сбрасываем синглтон для каждого теста
        RedisClient._instance = None
        RedisClient._client = None
        return RedisClient()

    def test_singleton(self) -> None:
        """Проверяет паттерн Singleton."""
        RedisClient._instance = None

        assert RedisClient() is RedisClient()

    def test_client_not_initialized(self, redis_client: RedisClient) -> None:
        """Проверяет ошибку при обращении к неинициализированному клиенту."""
        assert redis_client.is_connected is False
        with pytest.raises(RuntimeError, match="Redis клиент не инициализирован"):
            _ = redis_client.client

    def test_make_key(self, redis_client: RedisClient) -> None:
        """Проверяет формирование ключа с namespace."""
        assert redis_client._make_key("test_key") == "carpool:test_key"

    @pytest.mark.asyncio
    async def test_connect_with_namespace(self, redis_client: RedisClient) -> None:
        """Проверяет подключение и смену namespace."""
        mock_redis = AsyncMock()
        mock_redis.ping = AsyncMock(return_value=True)

        with patch("redis.asyncio.from_url", return_value=mock_redis):
            await redis_client.connect(
                url="redis://localhost:6379/0",
                max_connections=10,
                namespace="carpool_test",
            )

        assert redis_client.is_connected is True
        assert redis_client._make_key("station:7") == "carpool_test:station:7"
        mock_redis.ping.assert_called_once()

    @pytest.mark.asyncio
    async def test_connect_already_connected(self, redis_client: RedisClient) -> None:
        """Проверяет, что повторное подключение пропускается."""
        redis_client._client = AsyncMock()

        with patch("redis.asyncio.from_url") as mock_from_url:
            await redis_client.connect(url="redis://localhost:6379/0")

        mock_from_url.assert_not_called()

    @pytest.mark.asyncio
    async def test_disconnect(self, redis_client: RedisClient) -> None:
        """Проверяет отключение от Redis."""
        mock_redis = AsyncMock()
        redis_client._client = mock_redis

        await redis_client.disconnect()

        mock_redis.aclose.assert_called_once()
        assert redis_client._client is None

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, redis_client: RedisClient) -> None:
        """Проверяет установку значения с TTL."""
        mock_redis = AsyncMock()
        mock_redis.set.return_value = True
        redis_client._client = mock_redis

        assert await redis_client.set("key", "value", ttl=60) is True
        mock_redis.set.assert_called_once_with("carpool:key", "value", ex=60)

    @pytest.mark.asyncio
    async def test_delete(self, redis_client: RedisClient) -> None:
        """Проверяет удаление ключа."""
        mock_redis = AsyncMock()
        mock_redis.delete.return_value = 1
        redis_client._client = mock_redis

        assert await redis_client.delete("station:7") == 1
        mock_redis.delete.assert_called_once_with("carpool:station:7")

    @pytest.mark.asyncio
    async def test_get_model(self, redis_client: RedisClient) -> None:
        """Проверяет получение станции из кэша."""
        mock_redis = AsyncMock()
        mock_redis.get.return_value = (
            '{"id": "7", "name": "Hbf", "latitude": 53.553, "longitude": 10.0069}'
        )
        redis_client._client = mock_redis

        station = await redis_client.get_model("station:7", Station)

        assert station is not None
        assert station.id == "7"
        assert station.active is True
        mock_redis.get.assert_called_once_with("carpool:station:7")

    @pytest.mark.asyncio
    async def test_get_model_not_found(self, redis_client: RedisClient) -> None:
        """Проверяет промах кэша."""
        mock_redis = AsyncMock()
        mock_redis.get.return_value = None
        redis_client._client = mock_redis

        assert await redis_client.get_model("station:7", Station) is None

    @pytest.mark.asyncio
    async def test_get_model_corrupted(self, redis_client: RedisClient) -> None:
        """Проверяет, что повреждённая запись считается промахом."""
        mock_redis = AsyncMock()
        mock_redis.get.return_value = "invalid json"
        redis_client._client = mock_redis

        assert await redis_client.get_model("station:7", Station) is None

    @pytest.mark.asyncio
    async def test_set_model(self, redis_client: RedisClient) -> None:
        """Проверяет сохранение модели в JSON."""
        mock_redis = AsyncMock()
        mock_redis.set.return_value = True
        redis_client._client = mock_redis

        station = Station(id="7", name="Hbf", latitude=53.553, longitude=10.0069)
        assert await redis_client.set_model("station:7", station, ttl=600) is True

        key, payload = mock_redis.set.call_args[0]
        assert key == "carpool:station:7"
        assert Station.model_validate_json(payload) == station
        assert mock_redis.set.call_args[1]["ex"] == 600

    @pytest.mark.asyncio
    async def test_health_check(self, redis_client: RedisClient) -> None:
        """Проверяет health check."""
        mock_redis = AsyncMock()
        mock_redis.ping.return_value = True
        redis_client._client = mock_redis

        assert await redis_client.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_not_connected(self, redis_client: RedisClient) -> None:
        """Проверяет health check без подключения."""
        assert await redis_client.health_check() is False
