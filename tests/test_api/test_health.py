"""
Tests API pour la route de santé.
"""

from unittest.mock import MagicMock

from fastapi import status
from redis.exceptions import ConnectionError as RedisConnectionError

from formalis.api.v1.health import services as health_services

URL = "/api/v1/health"


class TestHealth:

    def test_healthy_without_redis(self, api_client):
        response = api_client.get(URL)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "ok"
        assert body["checks"]["database"]["status"] == "ok"
        assert body["checks"]["redis"] == {"status": "skipped", "error": "REDIS_URL non configuré"}

    def test_redis_down(self, api_client, monkeypatch):
        client = MagicMock()
        client.ping.side_effect = RedisConnectionError("Connection refused")
        monkeypatch.setattr(health_services, "get_redis", lambda: client)

        response = api_client.get(URL)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["redis"]["status"] == "error"
        assert body["checks"]["redis"]["error"] == "Connection refused"

    def test_redis_up(self, api_client, monkeypatch):
        client = MagicMock()
        monkeypatch.setattr(health_services, "get_redis", lambda: client)

        body = api_client.get(URL).json()

        assert body["checks"]["redis"]["status"] == "ok"
        client.ping.assert_called_once()

    def test_no_authentication_required(self, api_client):
        assert "Authorization" not in api_client.headers
        assert api_client.get(URL).status_code == status.HTTP_200_OK
