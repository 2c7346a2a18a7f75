"""
Lecture de l'historique, limitée à l'organisation du demandeur.

Deux portées :
- entity     : événements d'une fiche (entite_type + entite_id)
- entreprise : événements rattachés à une entreprise, après vérification
               que l'entreprise appartient à l'organisation
"""
from typing import Any, Dict, List, Tuple

from formalis.api.v1.historique.schemas import HistoriqueMode, HistoriqueQuery
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.models.crm.entreprise import Entreprise
from formalis.models.historique.historique_event import HistoriqueEvent
from formalis.services.actions import ensure_valid, list_action
from formalis.services.crud import TenantScopedRepository
from formalis.services.query import FilterOp, FilterSpec, PageRequest, TenantQuery, map_historique_event, paired_filters


def _scope_filters(ctx: TenantContext, query: HistoriqueQuery) -> List[FilterSpec]:
    if query.mode == HistoriqueMode.ENTREPRISE:
        # Distingue "entreprise inconnue" de "aucun événement"
        TenantScopedRepository(
            Entreprise, ctx.admin_db, ctx.organisation_id,
            not_found_message="Entreprise non trouvée",
        ).get(query.entreprise_id)
        return [FilterSpec("entreprise_id", FilterOp.EQ, query.entreprise_id)]

    return paired_filters(
        FilterSpec("entite_type", FilterOp.EQ, query.entite_type),
        FilterSpec("entite_id", FilterOp.EQ, query.entite_id),
    )


def build_filters(query: HistoriqueQuery) -> List[FilterSpec]:
    """Filtres optionnels de l'utilisateur (ignorés s'ils sont vides)."""
    return [
        FilterSpec("module", FilterOp.EQ, query.module),
        FilterSpec("action", FilterOp.EQ, query.action),
        FilterSpec("origine", FilterOp.EQ, query.origine),
        FilterSpec("user_nom", FilterOp.ILIKE, query.utilisateur),
        FilterSpec("created_at", FilterOp.DATE_GTE, query.date_debut),
        FilterSpec("created_at", FilterOp.DATE_LTE, query.date_fin),
    ]


@list_action("historique")
def get_historique(ctx: TenantContext, params: Dict[str, Any], page: PageRequest) -> Tuple[list, int]:
    """
    Événements paginés, du plus récent au plus ancien.

    Raises:
        InputValidationError: Portée incomplète ou filtre invalide
        NotFoundError: Entreprise absente de l'organisation
    """
    query = ensure_valid(HistoriqueQuery, params)

    rows, total = (
        TenantQuery(HistoriqueEvent, ctx.organisation_id)
        .filters(_scope_filters(ctx, query))
        .filters(build_filters(query))
        .fetch(ctx.admin_db, page)
    )
    return [map_historique_event(row) for row in rows], total
