"""
Résolution du tenant pour chaque action de données.

À partir de l'identité authentifiée (claim `sub` du JWT), détermine
l'organisation active, le rôle, et fournit deux poignées d'accès :
- db       : session restreinte (variables RLS sur l'organisation)
- admin_db : session élevée (hors RLS)

La résolution ne lève jamais : elle retourne soit un TenantContext,
soit un AuthFailure("Non authentifié"). Aucune nouvelle tentative.

Usage:
    @router.get("/salles")
    def list_salles(resolution: TenantResolution = Depends(get_tenant_resolution)):
        if isinstance(resolution, AuthFailure):
            ...
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formalis.core.auth.user_auth import bearer_scheme
from formalis.core.cache import CacheKeys, cache_delete, cache_get, cache_invalidate_pattern, cache_set
from formalis.core.errors import NOT_AUTHENTICATED
from formalis.core.security.jwt import verify_token
from formalis.core.security.permissions import coerce_role
from formalis.database.session_rls import configure_tenant_context, get_db, get_db_no_rls
from formalis.models.enums import UserRole
from formalis.models.organisation.utilisateur import Utilisateur

logger = logging.getLogger(__name__)


# =============================================================================
# TYPES DE RÉSULTAT
# =============================================================================

@dataclass
class TenantContext:
    """Tenant résolu pour la requête courante."""
    organisation_id: UUID
    user_id: UUID
    role: UserRole
    user_nom: str
    db: Session
    admin_db: Session


@dataclass
class AuthFailure:
    """Échec de résolution (pas de session, ou pas d'organisation)."""
    error: str = NOT_AUTHENTICATED


TenantResolution = Union[TenantContext, AuthFailure]


# =============================================================================
# RÉSOLUTION
# =============================================================================

def _load_membership(user_id: UUID, admin_db: Session) -> Optional[dict]:
    """
    Organisation + rôle de l'utilisateur, lecture via le cache.

    Le cache est un accélérateur : absent ou en panne, on lit la base.
    Un changement fait directement en base sans invalidation n'est vu
    qu'après expiration de la clé (CACHE_DEFAULT_TTL_SECONDS).
    """
    cache_key = CacheKeys.user_org(user_id)
    cached = cache_get(cache_key)
    if cached and cached.get("organisation_id"):
        return cached

    user = admin_db.execute(
        select(Utilisateur).where(Utilisateur.id == user_id)
    ).scalar_one_or_none()

    if user is None or not user.actif:
        return None

    membership = {
        "organisation_id": str(user.organisation_id),
        "role": user.role,
        "nom": user.nom_complet,
    }
    cache_set(cache_key, membership)
    return membership


def invalidate_membership(user_id: UUID) -> None:
    """À appeler quand l'organisation, le rôle ou le statut d'un utilisateur change."""
    cache_delete(CacheKeys.user_org(user_id))


def invalidate_all_memberships() -> None:
    cache_invalidate_pattern(CacheKeys.memberships())


def resolve_tenant(user_id: Optional[UUID], db: Session, admin_db: Session) -> TenantResolution:
    """
    Résout le tenant d'un utilisateur authentifié.

    Args:
        user_id: Identifiant issu du JWT (None = pas de session)
        db: Session restreinte à configurer sur l'organisation
        admin_db: Session élevée utilisée pour la recherche

    Returns:
        TenantContext, ou AuthFailure si l'utilisateur est inconnu,
        inactif ou sans organisation
    """
    if user_id is None:
        return AuthFailure()

    try:
        membership = _load_membership(user_id, admin_db)
    except SQLAlchemyError as e:
        logger.error(f"[tenant] Résolution impossible pour {user_id}: {e}")
        return AuthFailure()

    if membership is None:
        logger.info(f"[tenant] Aucune organisation pour l'utilisateur {user_id}")
        return AuthFailure()

    organisation_id = UUID(membership["organisation_id"])

    configure_tenant_context(db, organisation_id)

    return TenantContext(
        organisation_id=organisation_id,
        user_id=user_id,
        role=coerce_role(membership.get("role")),
        user_nom=membership.get("nom") or "Utilisateur",
        db=db,
        admin_db=admin_db,
    )


def _user_id_from_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[UUID]:
    """Extrait et valide le sujet du token Bearer (None si absent ou invalide)."""
    if credentials is None:
        return None

    try:
        payload = verify_token(credentials.credentials)
        return UUID(str(payload["sub"]))
    except (JWTError, ValueError) as e:
        logger.info(f"[tenant] Token rejeté: {e}")
        return None


# =============================================================================
# DÉPENDANCE FASTAPI
# =============================================================================

def get_tenant_resolution(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    admin_db: Session = Depends(get_db_no_rls),
) -> TenantResolution:
    """
    Dépendance à appeler en tête de chaque action de données.

    Ne lève jamais : la route décide de la forme de l'échec
    (liste vide, erreur `_form`...).
    """
    user_id = _user_id_from_credentials(credentials)
    return resolve_tenant(user_id, db, admin_db)
