"""
Services métier pour le module Salles.

Les salles ne sont jamais supprimées physiquement : actif = False.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from formalis.api.v1.salles.schemas import SalleInput, SalleResponse, SalleSummary
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.core.security.permissions import can_create, can_delete, can_edit, require_permission
from formalis.models.enums import HistoriqueAction, HistoriqueModule
from formalis.models.parametres.salle import Salle
from formalis.services.actions import delete_action, ensure_valid, list_action, mutation_action
from formalis.services.crud import TenantScopedRepository, row_to_dict
from formalis.services.historique import HistoriqueEntry, compute_changes, log_action, log_historique_batch
from formalis.services.query import PageRequest, TenantQuery, to_schema
from formalis.services.validation import IdList

NOT_FOUND = "Salle non trouvée"

FIELD_LABELS = {
    "nom": "Nom",
    "adresse": "Adresse",
    "capacite": "Capacité",
    "equipements": "Équipements",
}


def _repository(ctx: TenantContext) -> TenantScopedRepository:
    return TenantScopedRepository(Salle, ctx.db, ctx.organisation_id, not_found_message=NOT_FOUND)


def _active_salles(ctx: TenantContext) -> TenantQuery:
    return (
        TenantQuery(Salle, ctx.organisation_id)
        .where(Salle.actif.is_(True))
        .order_by(Salle.nom.asc())
    )


# =============================================================================
# LECTURE
# =============================================================================

@list_action("salles")
def list_salles(ctx: TenantContext, page: PageRequest, search: Optional[str] = None):
    """Salles actives, triées par nom ; recherche sur le nom et l'adresse."""
    rows, total = _active_salles(ctx).search([Salle.nom, Salle.adresse], search).fetch(ctx.db, page)
    return [to_schema(SalleResponse, row) for row in rows], total


@list_action("salles")
def list_all_salles(ctx: TenantContext):
    """Toutes les salles actives, sans pagination (sélecteurs)."""
    rows = _active_salles(ctx).all(ctx.db)
    return [to_schema(SalleSummary, row) for row in rows], len(rows)


# =============================================================================
# ÉCRITURE
# =============================================================================

@mutation_action("salles")
def create_salle(ctx: TenantContext, payload: Dict[str, Any]):
    data = ensure_valid(SalleInput, payload)
    require_permission(ctx.role, can_create, "créer une salle")

    salle = _repository(ctx).create(data.model_dump())

    log_action(
        ctx,
        module=HistoriqueModule.SALLE,
        action=HistoriqueAction.CREATED,
        entite_type="salle",
        entite_id=salle.id,
        entite_label=salle.nom,
        description=f'Salle "{salle.nom}" créée',
        objet_href="/salles",
    )
    return to_schema(SalleResponse, salle)


@mutation_action("salles")
def update_salle(ctx: TenantContext, salle_id: UUID, payload: Dict[str, Any]):
    data = ensure_valid(SalleInput, payload)
    require_permission(ctx.role, can_edit, "modifier une salle")

    repository = _repository(ctx)
    before = row_to_dict(repository.get(salle_id))
    values = data.model_dump()
    salle = repository.update(salle_id, values)

    changes = compute_changes(before, values, FIELD_LABELS)
    if changes["changed_fields"]:
        log_action(
            ctx,
            module=HistoriqueModule.SALLE,
            action=HistoriqueAction.UPDATED,
            entite_type="salle",
            entite_id=salle.id,
            entite_label=salle.nom,
            description=f'Salle "{salle.nom}" modifiée ({", ".join(changes["changed_fields"])})',
            objet_href="/salles",
            metadata=changes,
        )
    return to_schema(SalleResponse, salle)


@delete_action("salles")
def delete_salles(ctx: TenantContext, payload: Dict[str, Any]):
    """Suppression logique d'une sélection de salles."""
    selection = ensure_valid(IdList, payload)
    require_permission(ctx.role, can_delete, "supprimer des salles")

    repository = _repository(ctx)
    repository.soft_delete(selection.ids)

    salles: List[Salle] = (
        TenantQuery(Salle, ctx.organisation_id)
        .where(Salle.id.in_(selection.ids))
        .all(ctx.db)
    )
    log_historique_batch(ctx.admin_db, [
        HistoriqueEntry(
            organisation_id=ctx.organisation_id,
            user_id=ctx.user_id,
            user_nom=ctx.user_nom,
            user_role=ctx.role,
            module=HistoriqueModule.SALLE,
            action=HistoriqueAction.ARCHIVED,
            entite_type="salle",
            entite_id=salle.id,
            entite_label=salle.nom,
            description=f'Salle "{salle.nom}" supprimée',
        )
        for salle in salles
    ])
