"""
Services métier pour le module Tickets.

Les notifications (assignation, changement de statut) partent après le
commit du ticket ; leur échec est journalisé dans emails_envoyes et
n'annule jamais la mutation.
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from formalis.api.v1.tickets.schemas import (
    TicketCreate,
    TicketFilters,
    TicketSortField,
    TicketUpdate,
)
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.core.errors import InputValidationError
from formalis.core.security.permissions import can_archive, can_edit, require_permission
from formalis.models.crm.entreprise import Entreprise
from formalis.models.enums import (
    TICKET_STATUT_LABELS,
    HistoriqueAction,
    HistoriqueModule,
    TicketStatut,
    label_for,
    parse_enum,
)
from formalis.models.mixins import utcnow
from formalis.models.organisation.utilisateur import Utilisateur
from formalis.models.support.ticket import Ticket
from formalis.services.actions import delete_action, detail_action, ensure_valid, list_action, mutation_action
from formalis.services.crud import TenantScopedRepository
from formalis.services.email import EmailMessage, send_email, templates
from formalis.services.historique import HistoriqueEntry, log_action, log_historique_batch
from formalis.services.query import FilterOp, FilterSpec, PageRequest, TenantQuery, map_ticket
from formalis.services.sequences import next_numero
from formalis.services.storage import LocalStorage, StoredFile, build_storage_path, check_upload
from formalis.services.validation import IdList

logger = logging.getLogger(__name__)

NOT_FOUND = "Ticket non trouvé"
NUMERO_PREFIX = "TIC"

# Retour à "ouvert" depuis ces statuts : dates de résolution/clôture effacées
REOPENABLE = {TicketStatut.RESOLU.value, TicketStatut.FERME.value}


def _repository(ctx: TenantContext) -> TenantScopedRepository:
    return TenantScopedRepository(
        Ticket,
        ctx.db,
        ctx.organisation_id,
        duplicate_message="Ce numéro de ticket existe déjà",
        not_found_message=NOT_FOUND,
    )


def _href(ticket: Ticket) -> str:
    return f"/tickets/{ticket.id}"


def _statut_label(value: Optional[str]) -> Optional[str]:
    return label_for(TICKET_STATUT_LABELS, parse_enum(TicketStatut, value))


def _find_user(ctx: TenantContext, user_id: Optional[UUID]) -> Optional[Utilisateur]:
    if user_id is None:
        return None
    users = TenantQuery(Utilisateur, ctx.organisation_id).where(Utilisateur.id == user_id).all(ctx.admin_db)
    return users[0] if users else None


def _check_links(ctx: TenantContext, values: Dict[str, Any]) -> None:
    """
    L'entreprise et l'assigné doivent appartenir à l'organisation.

    Raises:
        InputValidationError: Rattachement hors organisation
    """
    errors: Dict[str, List[str]] = {}
    entreprise_id = values.get("entreprise_id")
    if entreprise_id is not None and not TenantScopedRepository(
            Entreprise, ctx.db, ctx.organisation_id).exists(entreprise_id):
        errors["entreprise_id"] = ["Entreprise non trouvée"]
    assignee_id = values.get("assignee_id")
    if assignee_id is not None and _find_user(ctx, assignee_id) is None:
        errors["assignee_id"] = ["Utilisateur non trouvé"]
    if errors:
        raise InputValidationError(errors)


async def _notify_assignee(ctx: TenantContext, ticket: Ticket, assignee: Utilisateur) -> None:
    subject, html = templates.ticket_assigne(
        ticket.numero_affichage, ticket.titre, ctx.user_nom, ticket.description
    )
    await send_email(ctx.admin_db, EmailMessage(
        organisation_id=ctx.organisation_id,
        to=assignee.email,
        to_name=assignee.nom_complet,
        subject=subject,
        html=html,
        entite_type="ticket",
        entite_id=ticket.id,
        template="ticket_assigned",
    ))


# =============================================================================
# LECTURE
# =============================================================================

@list_action("tickets")
def list_tickets(
        ctx: TenantContext,
        page: PageRequest,
        search: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_dir: str = "desc",
):
    """
    Tickets non archivés de l'organisation.

    `my_tickets` restreint aux tickets assignés à l'utilisateur courant.
    """
    criteria = ensure_valid(TicketFilters, filters or {})

    query = (
        TenantQuery(Ticket, ctx.organisation_id)
        .where(Ticket.archived_at.is_(None))
        .search([Ticket.titre, Ticket.numero_affichage, Ticket.auteur_nom], search)
        .filter(
            FilterSpec("statut", FilterOp.EQ, criteria.statut),
            FilterSpec("priorite", FilterOp.EQ, criteria.priorite),
            FilterSpec("categorie", FilterOp.EQ, criteria.categorie),
            FilterSpec("entreprise_id", FilterOp.EQ, criteria.entreprise_id),
            FilterSpec("assignee_id", FilterOp.EQ, criteria.assignee_id),
        )
    )
    if criteria.my_tickets:
        query = query.where(Ticket.assignee_id == ctx.user_id)

    if sort_by in {field.value for field in TicketSortField}:
        column = getattr(Ticket, sort_by)
        query = query.order_by(column.asc() if sort_dir == "asc" else column.desc())

    rows, total = query.fetch(ctx.db, page)
    return [map_ticket(row) for row in rows], total


@detail_action("tickets")
def get_ticket(ctx: TenantContext, ticket_id: UUID):
    ticket = _repository(ctx).get(ticket_id)
    return {**map_ticket(ticket), "auteur_email": ticket.auteur_email}


# =============================================================================
# ÉCRITURE
# =============================================================================

@mutation_action("tickets")
async def create_ticket(ctx: TenantContext, payload: Dict[str, Any]):
    """Tout membre de l'organisation peut ouvrir un ticket."""
    data = ensure_valid(TicketCreate, payload)
    values = data.model_dump()
    _check_links(ctx, values)

    auteur = _find_user(ctx, ctx.user_id)
    repository = _repository(ctx)
    ticket = repository.create({
        **values,
        "numero_affichage": next_numero(ctx.db, ctx.organisation_id, NUMERO_PREFIX),
        "statut": TicketStatut.OUVERT.value,
        "auteur_user_id": ctx.user_id,
        "auteur_nom": ctx.user_nom,
        "auteur_email": auteur.email if auteur else None,
        "auteur_type": ctx.role.value,
    })

    log_action(
        ctx,
        module=HistoriqueModule.TICKET,
        action=HistoriqueAction.CREATED,
        entite_type="ticket",
        entite_id=ticket.id,
        entite_label=ticket.label,
        entreprise_id=ticket.entreprise_id,
        description=f'Ticket "{ticket.titre}" créé',
        objet_href=_href(ticket),
    )

    assignee = _find_user(ctx, ticket.assignee_id)
    if assignee is not None:
        await _notify_assignee(ctx, ticket, assignee)

    return map_ticket(ticket)


def _status_values(current_statut: str, new_statut: str) -> Dict[str, Any]:
    """Dates de cycle de vie associées à une transition de statut."""
    values: Dict[str, Any] = {"statut": new_statut}
    if new_statut == TicketStatut.RESOLU.value:
        values["resolved_at"] = utcnow()
    elif new_statut == TicketStatut.FERME.value:
        values["closed_at"] = utcnow()
    elif new_statut == TicketStatut.OUVERT.value and current_statut in REOPENABLE:
        values["resolved_at"] = None
        values["closed_at"] = None
    return values


@mutation_action("tickets")
async def update_ticket(ctx: TenantContext, ticket_id: UUID, payload: Dict[str, Any]):
    data = ensure_valid(TicketUpdate, payload)
    require_permission(ctx.role, can_edit, "modifier un ticket")

    repository = _repository(ctx)
    current = repository.get(ticket_id)
    old_statut = current.statut
    old_assignee_id = current.assignee_id
    auteur_email = current.auteur_email

    requested = data.model_dump(exclude_unset=True)
    # statut et priorité ne sont jamais vidés
    for key in ("statut", "priorite"):
        if requested.get(key, "") is None:
            requested.pop(key)
    _check_links(ctx, requested)

    values = {key: value for key, value in requested.items() if key != "statut"}
    new_statut = requested.get("statut")
    status_changed = new_statut is not None and new_statut != old_statut
    if status_changed:
        values.update(_status_values(old_statut, new_statut))

    ticket = repository.update(ticket_id, values)
    assignee_changed = "assignee_id" in values and ticket.assignee_id != old_assignee_id

    entries: List[HistoriqueEntry] = []
    common = dict(
        organisation_id=ctx.organisation_id,
        user_id=ctx.user_id,
        user_nom=ctx.user_nom,
        user_role=ctx.role,
        module=HistoriqueModule.TICKET,
        entite_type="ticket",
        entite_id=ticket.id,
        entite_label=ticket.label,
        entreprise_id=ticket.entreprise_id,
        objet_href=_href(ticket),
    )
    if status_changed:
        entries.append(HistoriqueEntry(
            action=HistoriqueAction.STATUS_CHANGED,
            description=(
                f'Ticket "{ticket.titre}" : {_statut_label(old_statut)} → {_statut_label(new_statut)}'
            ),
            metadata={"ancien_statut": old_statut, "nouveau_statut": new_statut},
            **common,
        ))
    if assignee_changed:
        entries.append(HistoriqueEntry(
            action=HistoriqueAction.ASSIGNED,
            description=f'Ticket "{ticket.titre}" réassigné',
            metadata={"ancien_assignee_id": old_assignee_id, "nouveau_assignee_id": ticket.assignee_id},
            **common,
        ))
    log_historique_batch(ctx.admin_db, entries)

    if assignee_changed:
        assignee = _find_user(ctx, ticket.assignee_id)
        if assignee is not None:
            await _notify_assignee(ctx, ticket, assignee)

    if status_changed and auteur_email:
        subject, html = templates.ticket_statut_change(
            ticket.numero_affichage, ticket.titre, old_statut, new_statut, ctx.user_nom
        )
        await send_email(ctx.admin_db, EmailMessage(
            organisation_id=ctx.organisation_id,
            to=auteur_email,
            to_name=ticket.auteur_nom,
            subject=subject,
            html=html,
            entite_type="ticket",
            entite_id=ticket.id,
            template="ticket_status_changed",
        ))

    return map_ticket(ticket)


@delete_action("tickets")
def archive_tickets(ctx: TenantContext, payload: Dict[str, Any]):
    selection = ensure_valid(IdList, payload)
    require_permission(ctx.role, can_archive, "archiver des tickets")
    _repository(ctx).archive(selection.ids)


# =============================================================================
# PIÈCES JOINTES
# =============================================================================

def store_attachment(
        ctx: TenantContext,
        storage: LocalStorage,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
        ticket_id: Optional[str] = None,
) -> StoredFile:
    """
    Contrôle puis enregistre une pièce jointe de ticket.

    Raises:
        UploadRejectedError: Fichier absent, type ou taille refusés
        StorageError: Échec d'écriture
    """
    check_upload(filename, content_type, len(content))
    path = build_storage_path(ctx.organisation_id, ticket_id, filename)
    url = storage.save(path, content)
    logger.info(f"[tickets/upload] {path} ({len(content)} octets)")
    return StoredFile(url=url, nom=filename, taille=len(content), mime_type=content_type)
