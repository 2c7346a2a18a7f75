"""
Configuration de la session SQLAlchemy - Connexion PostgreSQL
Fournit l'engine, la factory de sessions et un context manager hors FastAPI
"""
import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from formalis.core.config import settings

logger = logging.getLogger(__name__)


# === 1. ENGINE (Connexion PostgreSQL) ===

def _engine_options(url: str) -> dict:
    """Options de pool : QueuePool pour PostgreSQL, défaut SQLAlchemy sinon (SQLite de dev)."""
    if not url.startswith("postgresql"):
        return {"pool_pre_ping": True}

    return {
        # === Pool de connexions ===
        "poolclass": QueuePool,
        "pool_size": 5,              # Nombre de connexions permanentes
        "max_overflow": 10,          # Connexions supplémentaires si besoin
        "pool_timeout": 30,
        "pool_recycle": 1800,        # Recycler après 30 min
        "pool_pre_ping": True,       # Vérifier que la connexion est vivante
        "connect_args": {
            "application_name": "formalis",
            "options": "-c timezone=UTC",
        },
    }


engine = create_engine(settings.DATABASE_URL, echo=False, **_engine_options(settings.DATABASE_URL))


# === 2. SESSION LOCAL (Factory de sessions) ===

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,   # Garder les objets accessibles après commit
)


# === 3. CONTEXT MANAGER ===

class db_session:
    """
    Context manager pour utiliser une session hors FastAPI.

    Gère automatiquement le commit/rollback et la fermeture.

    Usage:
        with db_session() as db:
            db.add(organisation)
            # Commit automatique si pas d'erreur
    """

    def __init__(self, commit_on_exit: bool = True):
        self.db: Optional[Session] = None
        self.commit_on_exit = commit_on_exit

    def __enter__(self) -> Session:
        self.db = SessionLocal()
        return self.db

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None and self.commit_on_exit:
                self.db.commit()
            else:
                self.db.rollback()
        finally:
            self.db.close()

        # Ne pas supprimer l'exception (la propager)
        return False


# === 4. VÉRIFICATION DE CONNEXION ===

def ping_database(db: Session) -> None:
    """
    Exécute un SELECT 1 sur la session donnée.

    Raises:
        SQLAlchemyError: Si la base ne répond pas
    """
    db.execute(text("SELECT 1"))
