"""Client Redis singleton pour l'application."""

import logging
from typing import Optional

import redis

from formalis.core.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Client Redis singleton avec pool de connexions.

    Le client est créé paresseusement au premier appel. Si REDIS_URL
    n'est pas configuré, get_client() retourne None : c'est un état
    normal, tous les appelants doivent le gérer.
    """

    _instance: Optional[redis.Redis] = None

    @classmethod
    def get_client(cls) -> Optional[redis.Redis]:
        """Retourne l'instance singleton du client Redis, ou None si non configuré."""
        if not settings.redis_configured:
            return None

        if cls._instance is None:
            cls._instance = redis.Redis.from_url(
                settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=True,  # Décoder automatiquement en string
                socket_keepalive=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            logger.info("[redis] Client initialisé")
        return cls._instance

    @classmethod
    def close(cls):
        """Ferme la connexion Redis (à appeler lors de l'arrêt de l'app)."""
        if cls._instance:
            cls._instance.close()
            cls._instance = None


def get_redis() -> Optional[redis.Redis]:
    """Fonction helper pour récupérer le client Redis (None si désactivé)."""
    return RedisClient.get_client()
