"""
Services métier pour le module Fonctions.

- Première lecture d'une organisation sans fonction : DEFAULT_FONCTIONS
  sont insérées (ordre 1..n).
- Une nouvelle fonction prend l'ordre maximal + 1.
- Le nom est unique par organisation.
- Suppression physique : aucune référence historique.
"""
import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from formalis.api.v1.fonctions.schemas import FonctionInput, FonctionResponse
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.core.security.permissions import can_manage_settings, require_permission
from formalis.models.parametres.fonction import DEFAULT_FONCTIONS, FonctionPredefinie
from formalis.services.actions import delete_action, ensure_valid, list_action, mutation_action
from formalis.services.crud import TenantScopedRepository
from formalis.services.query import TenantQuery, to_schema

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Cette fonction existe déjà"


def _repository(ctx: TenantContext) -> TenantScopedRepository:
    return TenantScopedRepository(
        FonctionPredefinie,
        ctx.db,
        ctx.organisation_id,
        duplicate_message=DUPLICATE_MESSAGE,
        duplicate_field="nom",
        not_found_message="Fonction non trouvée",
    )


def _ordered(ctx: TenantContext) -> List[FonctionPredefinie]:
    return (
        TenantQuery(FonctionPredefinie, ctx.organisation_id)
        .order_by(FonctionPredefinie.ordre.asc(), FonctionPredefinie.nom.asc())
        .all(ctx.db)
    )


def seed_default_fonctions(db: Session, organisation_id: UUID) -> None:
    """Insère les fonctions par défaut (une requête concurrente a pu le faire avant)."""
    db.add_all([
        FonctionPredefinie(organisation_id=organisation_id, nom=nom, ordre=index)
        for index, nom in enumerate(DEFAULT_FONCTIONS, start=1)
    ])
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"[fonctions] Fonctions par défaut déjà créées pour {organisation_id}")


def next_ordre(ctx: TenantContext) -> int:
    current = ctx.db.execute(
        select(func.max(FonctionPredefinie.ordre))
        .where(FonctionPredefinie.organisation_id == ctx.organisation_id)
    ).scalar()
    return (current or 0) + 1


@list_action("fonctions")
def list_fonctions(ctx: TenantContext):
    """Fonctions triées par ordre puis nom."""
    rows = _ordered(ctx)
    if not rows:
        seed_default_fonctions(ctx.db, ctx.organisation_id)
        rows = _ordered(ctx)
    return [to_schema(FonctionResponse, row) for row in rows], len(rows)


@mutation_action("fonctions")
def create_fonction(ctx: TenantContext, payload: Dict[str, Any]):
    data = ensure_valid(FonctionInput, payload)
    require_permission(ctx.role, can_manage_settings, "gérer les fonctions")

    fonction = _repository(ctx).create({"nom": data.nom, "ordre": next_ordre(ctx)})
    return to_schema(FonctionResponse, fonction)


@mutation_action("fonctions")
def update_fonction(ctx: TenantContext, fonction_id: UUID, payload: Dict[str, Any]):
    data = ensure_valid(FonctionInput, payload)
    require_permission(ctx.role, can_manage_settings, "gérer les fonctions")

    fonction = _repository(ctx).update(fonction_id, {"nom": data.nom})
    return to_schema(FonctionResponse, fonction)


@delete_action("fonctions")
def delete_fonction(ctx: TenantContext, fonction_id: UUID):
    require_permission(ctx.role, can_manage_settings, "gérer les fonctions")
    _repository(ctx).hard_delete(fonction_id)
