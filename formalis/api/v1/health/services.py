"""
Vérification des dépendances (base de données, Redis).

Chaque contrôle retourne {status: ok|error|skipped, latency?, error?} ;
le statut global est "ok" si tous les contrôles sont ok ou skipped.
"""
import logging
import time
from typing import Callable, Dict, Optional

from pydantic import BaseModel
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formalis.core.redis_client import get_redis
from formalis.database.session import ping_database

logger = logging.getLogger(__name__)

HEALTHY = ("ok", "skipped")


class CheckResult(BaseModel):
    status: str
    latency: Optional[int] = None
    error: Optional[str] = None


class HealthReport(BaseModel):
    status: str
    checks: Dict[str, CheckResult]

    @property
    def healthy(self) -> bool:
        return self.status == "ok"


def _timed(name: str, probe: Callable[[], None], errors: tuple) -> CheckResult:
    start = time.monotonic()
    try:
        probe()
    except errors as e:
        latency = int((time.monotonic() - start) * 1000)
        logger.warning(f"[health] {name} en erreur: {e}")
        return CheckResult(status="error", latency=latency, error=str(e) or "Connexion échouée")
    return CheckResult(status="ok", latency=int((time.monotonic() - start) * 1000))


def check_database(db: Session) -> CheckResult:
    return _timed("database", lambda: ping_database(db), (SQLAlchemyError,))


def check_redis() -> CheckResult:
    client = get_redis()
    if client is None:
        return CheckResult(status="skipped", error="REDIS_URL non configuré")
    return _timed("redis", client.ping, (RedisError, OSError))


def run_checks(db: Session) -> HealthReport:
    checks = {
        "database": check_database(db),
        "redis": check_redis(),
    }
    all_ok = all(check.status in HEALTHY for check in checks.values())
    return HealthReport(status="ok" if all_ok else "degraded", checks=checks)
