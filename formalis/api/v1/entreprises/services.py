"""
Services métier pour le module Entreprises.

Version multi-tenant : toutes les requêtes filtrent par organisation_id.
L'archivage (archived_at) remplace la suppression.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from formalis.api.v1.entreprises.schemas import (
    EntrepriseCreate,
    EntrepriseResponse,
    EntrepriseSortField,
    EntrepriseUpdate,
)
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.core.security.permissions import can_archive, can_create, can_edit, require_permission
from formalis.models.crm.entreprise import Entreprise
from formalis.models.enums import HistoriqueAction, HistoriqueModule
from formalis.services.actions import delete_action, detail_action, ensure_valid, list_action, mutation_action
from formalis.services.crud import TenantScopedRepository, row_to_dict
from formalis.services.historique import HistoriqueEntry, compute_changes, log_action, log_historique_batch
from formalis.services.query import FilterOp, FilterSpec, PageRequest, TenantQuery, to_schema
from formalis.services.sequences import next_numero
from formalis.services.validation import IdList

NOT_FOUND = "Entreprise non trouvée"
NUMERO_PREFIX = "ENT"

FIELD_LABELS = {
    "nom": "Nom",
    "siret": "SIRET",
    "email": "Email",
    "telephone": "Téléphone",
    "adresse": "Adresse",
    "code_postal": "Code postal",
    "ville": "Ville",
}


def _repository(ctx: TenantContext) -> TenantScopedRepository:
    return TenantScopedRepository(
        Entreprise,
        ctx.db,
        ctx.organisation_id,
        duplicate_message="Ce numéro d'entreprise existe déjà",
        not_found_message=NOT_FOUND,
    )


def _href(entreprise: Entreprise) -> str:
    return f"/entreprises/{entreprise.id}"


def _log_batch(ctx: TenantContext, entreprises: List[Entreprise], action: HistoriqueAction, verb: str) -> None:
    log_historique_batch(ctx.admin_db, [
        HistoriqueEntry(
            organisation_id=ctx.organisation_id,
            user_id=ctx.user_id,
            user_nom=ctx.user_nom,
            user_role=ctx.role,
            module=HistoriqueModule.ENTREPRISE,
            action=action,
            entite_type="entreprise",
            entite_id=entreprise.id,
            entite_label=entreprise.label,
            entreprise_id=entreprise.id,
            description=f'Entreprise "{entreprise.nom}" {verb}',
            objet_href=_href(entreprise),
        )
        for entreprise in entreprises
    ])


# =============================================================================
# LECTURE
# =============================================================================

@list_action("entreprises")
def list_entreprises(
        ctx: TenantContext,
        page: PageRequest,
        search: Optional[str] = None,
        show_archived: bool = False,
        sort_by: Optional[str] = None,
        sort_dir: str = "desc",
):
    """
    Entreprises actives (ou archivées si show_archived).

    Recherche sur nom, SIRET et email ; tri limité à EntrepriseSortField.
    """
    query = (
        TenantQuery(Entreprise, ctx.organisation_id)
        .filter(FilterSpec("archived_at", FilterOp.IS_NULL, not show_archived))
        .search([Entreprise.nom, Entreprise.siret, Entreprise.email], search)
    )

    if sort_by in {field.value for field in EntrepriseSortField}:
        column = getattr(Entreprise, sort_by)
        query = query.order_by(column.asc() if sort_dir == "asc" else column.desc())

    rows, total = query.fetch(ctx.db, page)
    return [to_schema(EntrepriseResponse, row) for row in rows], total


@detail_action("entreprises")
def get_entreprise(ctx: TenantContext, entreprise_id: UUID):
    return to_schema(EntrepriseResponse, _repository(ctx).get(entreprise_id))


# =============================================================================
# ÉCRITURE
# =============================================================================

@mutation_action("entreprises")
def create_entreprise(ctx: TenantContext, payload: Dict[str, Any]):
    data = ensure_valid(EntrepriseCreate, payload)
    require_permission(ctx.role, can_create, "créer une entreprise")

    numero = next_numero(ctx.db, ctx.organisation_id, NUMERO_PREFIX)
    entreprise = _repository(ctx).create({"numero_affichage": numero, **data.model_dump()})

    log_action(
        ctx,
        module=HistoriqueModule.ENTREPRISE,
        action=HistoriqueAction.CREATED,
        entite_type="entreprise",
        entite_id=entreprise.id,
        entite_label=entreprise.label,
        entreprise_id=entreprise.id,
        description=f'Entreprise "{entreprise.nom}" créée',
        objet_href=_href(entreprise),
    )
    return to_schema(EntrepriseResponse, entreprise)


@mutation_action("entreprises")
def update_entreprise(ctx: TenantContext, entreprise_id: UUID, payload: Dict[str, Any]):
    data = ensure_valid(EntrepriseUpdate, payload)
    require_permission(ctx.role, can_edit, "modifier une entreprise")

    repository = _repository(ctx)
    before = row_to_dict(repository.get(entreprise_id))
    values = data.model_dump(exclude_unset=True)
    entreprise = repository.update(entreprise_id, values)

    changes = compute_changes(before, values, FIELD_LABELS)
    if changes["changed_fields"]:
        log_action(
            ctx,
            module=HistoriqueModule.ENTREPRISE,
            action=HistoriqueAction.UPDATED,
            entite_type="entreprise",
            entite_id=entreprise.id,
            entite_label=entreprise.label,
            entreprise_id=entreprise.id,
            description=f'Entreprise "{entreprise.nom}" modifiée ({", ".join(changes["changed_fields"])})',
            objet_href=_href(entreprise),
            metadata=changes,
        )
    return to_schema(EntrepriseResponse, entreprise)


def _selected(ctx: TenantContext, ids: List[UUID]) -> List[Entreprise]:
    return TenantQuery(Entreprise, ctx.organisation_id).where(Entreprise.id.in_(ids)).all(ctx.db)


@delete_action("entreprises")
def archive_entreprises(ctx: TenantContext, payload: Dict[str, Any]):
    selection = ensure_valid(IdList, payload)
    require_permission(ctx.role, can_archive, "archiver des entreprises")

    _repository(ctx).archive(selection.ids)
    _log_batch(ctx, _selected(ctx, selection.ids), HistoriqueAction.ARCHIVED, "archivée")


@delete_action("entreprises")
def unarchive_entreprises(ctx: TenantContext, payload: Dict[str, Any]):
    selection = ensure_valid(IdList, payload)
    require_permission(ctx.role, can_archive, "désarchiver des entreprises")

    _repository(ctx).set_flag(selection.ids, {"archived_at": None})
    _log_batch(ctx, _selected(ctx, selection.ids), HistoriqueAction.UNARCHIVED, "désarchivée")
