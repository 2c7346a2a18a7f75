"""
Cache applicatif best-effort au-dessus de Redis.

Le cache n'est jamais la source de vérité : toute lecture doit pouvoir
retomber sur la base en cas d'absence de clé, de Redis non configuré
ou de Redis indisponible. Aucune fonction de ce module ne lève.
"""

import json
import logging
from typing import Any, Optional

from redis.exceptions import RedisError

from formalis.core.config import settings
from formalis.core.redis_client import get_redis

logger = logging.getLogger(__name__)


def cache_get(key: str) -> Optional[Any]:
    """Retourne la valeur désérialisée, ou None (clé absente ou cache indisponible)."""
    client = get_redis()
    if client is None:
        return None

    try:
        raw = client.get(key)
        if not raw:
            return None
        return json.loads(raw)
    except (RedisError, ValueError) as e:
        logger.warning(f"[cache] Lecture impossible pour {key}: {e}")
        return None


def cache_set(key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
    """Stocke une valeur sérialisée en JSON avec un TTL (secondes)."""
    client = get_redis()
    if client is None:
        return

    ttl = ttl_seconds or settings.CACHE_DEFAULT_TTL_SECONDS
    try:
        client.set(key, json.dumps(value, default=str), ex=ttl)
    except (RedisError, TypeError) as e:
        logger.warning(f"[cache] Écriture impossible pour {key}: {e}")


def cache_delete(*keys: str) -> None:
    """Supprime une ou plusieurs clés."""
    client = get_redis()
    if client is None or not keys:
        return

    try:
        client.delete(*keys)
    except RedisError as e:
        logger.warning(f"[cache] Suppression impossible: {e}")


def cache_invalidate_pattern(pattern: str) -> None:
    """
    Supprime toutes les clés correspondant à un motif (ex: "user:abc:*").

    Utilise SCAN pour ne pas bloquer Redis.
    """
    client = get_redis()
    if client is None:
        return

    try:
        batch = []
        for key in client.scan_iter(match=pattern, count=100):
            batch.append(key)
            if len(batch) >= 100:
                client.delete(*batch)
                batch = []
        if batch:
            client.delete(*batch)
    except RedisError as e:
        logger.warning(f"[cache] Invalidation impossible pour {pattern}: {e}")


class CacheKeys:
    """Constructeurs de clés de cache."""

    @staticmethod
    def user_org(user_id: Any) -> str:
        """Organisation + rôle d'un utilisateur (résolution du tenant)."""
        return f"user:{user_id}:org"

    @staticmethod
    def memberships() -> str:
        """Motif couvrant l'appartenance de tous les utilisateurs."""
        return "user:*:org"
