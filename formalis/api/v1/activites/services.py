"""
Services métier pour le module Activités.

Toute personne de l'organisation peut saisir une activité : pas de
contrôle de rôle au-delà de l'appartenance au tenant.
"""
from typing import Any, Dict, Optional

from formalis.api.v1.activites.schemas import ActiviteCreate, ActiviteFilters
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.models.enums import HistoriqueAction, HistoriqueModule
from formalis.models.historique.activite import Activite
from formalis.services.actions import ensure_valid, list_action, mutation_action
from formalis.services.crud import TenantScopedRepository
from formalis.services.historique import log_action
from formalis.services.query import FilterOp, FilterSpec, PageRequest, TenantQuery, map_activite, paired_filters


@list_action("activites")
def list_activites(
        ctx: TenantContext,
        entite_type: Optional[str],
        entite_id: Optional[str],
        page: PageRequest,
):
    """Activités du tenant ; filtrées sur une fiche si type ET id sont fournis."""
    filters = ensure_valid(ActiviteFilters, {"entite_type": entite_type, "entite_id": entite_id})
    rows, total = (
        TenantQuery(Activite, ctx.organisation_id)
        .filters(paired_filters(
            FilterSpec("entite_type", FilterOp.EQ, filters.entite_type),
            FilterSpec("entite_id", FilterOp.EQ, filters.entite_id),
        ))
        .fetch(ctx.db, page)
    )
    return [map_activite(row) for row in rows], total


@mutation_action("activites")
def create_activite(ctx: TenantContext, payload: Dict[str, Any]):
    data = ensure_valid(ActiviteCreate, payload)

    activite = TenantScopedRepository(Activite, ctx.db, ctx.organisation_id).create({
        "auteur_id": ctx.user_id,
        "contenu": data.contenu,
        "entite_type": data.entite_type,
        "entite_id": data.entite_id,
    })

    # Rattachement retenu seulement si le type et l'identifiant sont fournis ensemble
    linked = data.entite_type is not None and data.entite_id is not None
    log_action(
        ctx,
        module=HistoriqueModule.ACTIVITE,
        action=HistoriqueAction.CREATED,
        entite_type=data.entite_type if linked else "activite",
        entite_id=data.entite_id if linked else activite.id,
        entreprise_id=data.entite_id if linked and data.entite_type == "entreprise" else None,
        description=f"Activité ajoutée : {data.contenu[:100]}",
    )
    return map_activite(activite)
