"""
Gestion des sessions de base de données avec support RLS.

Deux poignées d'accès aux données :
- get_db()        : session restreinte, variables RLS positionnées sur
                    l'organisation de la requête
- get_db_no_rls() : session élevée (équivalent service_role), utilisée
                    pour la résolution du tenant, l'historique et les
                    lectures déjà filtrées explicitement par organisation

Les variables de session ne sont positionnées que sur PostgreSQL.
"""

from typing import Generator, Optional
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.orm import Session

from formalis.database.session import SessionLocal


def configure_tenant_context(db: Session, organisation_id: Optional[UUID], bypass_rls: bool = False) -> None:
    """
    Configure les variables de session PostgreSQL lues par les politiques RLS.

    Args:
        db: Session SQLAlchemy
        organisation_id: Organisation courante (None = aucune)
        bypass_rls: Si True, les politiques laissent tout passer
    """
    if db.get_bind().dialect.name != "postgresql":
        return

    db.execute(
        text("SELECT set_config('app.current_organisation_id', :org, false)"),
        {"org": str(organisation_id) if organisation_id else ""},
    )
    db.execute(
        text("SELECT set_config('app.bypass_rls', :flag, false)"),
        {"flag": "true" if bypass_rls else "false"},
    )


def get_db() -> Generator[Session, None, None]:
    """
    Dépendance FastAPI pour obtenir une session DB restreinte (RLS).

    Yields:
        Session: Session SQLAlchemy, les variables RLS sont positionnées
        par la résolution du tenant (aucune organisation avant cela)
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db_no_rls() -> Generator[Session, None, None]:
    """
    Session DB SANS contexte RLS (poignée élevée).

    ⚠️ ATTENTION: toute requête passant par cette session doit filtrer
    explicitement sur organisation_id.
    """
    db = SessionLocal()
    try:
        configure_tenant_context(db, organisation_id=None, bypass_rls=True)
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

