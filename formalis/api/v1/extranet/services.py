"""
Services métier pour le module Extranet.

Invitation :
1. contrôle des accès existants (actif, ou invitation encore valide)
2. compte chez le fournisseur d'authentification (retrouvé ou créé)
3. accès extranet en statut `invite` avec un jeton à usage unique
4. email d'invitation (Resend), puis événement d'historique
"""
import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional
from uuid import UUID

from formalis.api.v1.extranet.schemas import ExtranetAccesResponse, InvitationResponse, InviteInput
from formalis.core.auth.provider import AuthProvider, AuthProviderError
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.core.config import settings
from formalis.core.errors import DuplicateError, ExternalServiceError
from formalis.core.security.permissions import can_invite_extranet, require_permission
from formalis.models.enums import ExtranetStatut, HistoriqueAction, HistoriqueModule
from formalis.models.extranet.extranet_acces import ExtranetAcces
from formalis.models.mixins import utcnow
from formalis.models.organisation.organisation import Organisation
from formalis.services.actions import detail_action, ensure_valid, mutation_action
from formalis.services.crud import TenantScopedRepository
from formalis.services.email import EmailMessage, send_email, templates
from formalis.services.historique import log_action
from formalis.services.query import TenantQuery, to_schema

logger = logging.getLogger(__name__)

ALREADY_ACTIVE = "Cette personne a déjà un accès extranet actif"
ALREADY_INVITED = "Une invitation est déjà en cours pour cette personne"


def _find_acces(ctx: TenantContext, entite_type: str, entite_id: UUID) -> Optional[ExtranetAcces]:
    rows = (
        TenantQuery(ExtranetAcces, ctx.organisation_id)
        .where(ExtranetAcces.entite_type == entite_type, ExtranetAcces.entite_id == entite_id)
        .all(ctx.db)
    )
    return rows[0] if rows else None


def invite_link(token: str) -> str:
    """Lien d'invitation envoyé par email (résolu par GET /auth/extranet-invite)."""
    return f"{settings.API_URL.rstrip('/')}/api/v1/auth/extranet-invite?token={token}"


async def _provider_user_id(provider: AuthProvider, data: InviteInput) -> UUID:
    """
    Compte existant pour cet email, sinon création.

    Raises:
        ExternalServiceError: Fournisseur indisponible ou en erreur
    """
    try:
        user = await provider.find_user_by_email(data.email)
        if user is None:
            # Mot de passe provisoire : l'invité choisira le sien
            user = await provider.create_user(
                data.email,
                secrets.token_urlsafe(24),
                {"prenom": data.prenom, "nom": data.nom, "extranet_role": data.entite_type.value},
            )
    except AuthProviderError as e:
        logger.error(f"[extranet] Compte fournisseur impossible pour {data.email}: {e.message}")
        raise ExternalServiceError(f"Erreur création du compte : {e.message}")

    user_id = (user.get("user") or user).get("id")
    if not user_id:
        raise ExternalServiceError("Erreur création du compte : identifiant manquant")
    return UUID(str(user_id))


# =============================================================================
# INVITATION
# =============================================================================

@mutation_action("extranet")
async def invite_to_extranet(ctx: TenantContext, payload: Dict[str, Any], provider: AuthProvider):
    data = ensure_valid(InviteInput, payload)
    require_permission(ctx.role, can_invite_extranet, "inviter une personne sur l'extranet")

    role = data.entite_type.value
    existing = _find_acces(ctx, role, data.entite_id)
    if existing is not None:
        if existing.statut == ExtranetStatut.ACTIF.value:
            raise DuplicateError(ALREADY_ACTIVE)
        if existing.statut == ExtranetStatut.INVITE.value and existing.invite_token and not existing.is_token_expired():
            raise DuplicateError(ALREADY_INVITED)

    user_id = await _provider_user_id(provider, data)

    token = secrets.token_urlsafe(32)
    now = utcnow()
    values = {
        "user_id": user_id,
        "role": role,
        "statut": ExtranetStatut.INVITE.value,
        "invite_token": token,
        "invite_token_expires_at": now + timedelta(hours=settings.INVITE_TOKEN_TTL_HOURS),
        "invite_le": now,
    }

    repository = TenantScopedRepository(
        ExtranetAcces,
        ctx.db,
        ctx.organisation_id,
        duplicate_message=ALREADY_INVITED,
        not_found_message="Accès extranet non trouvé",
    )
    if existing is not None:
        acces = repository.update(existing.id, values)
    else:
        acces = repository.create({"entite_type": role, "entite_id": data.entite_id, **values})

    organisation = ctx.admin_db.get(Organisation, ctx.organisation_id)
    org_name = organisation.nom if organisation else settings.APP_NAME
    subject, html = templates.invitation_extranet(data.prenom, data.nom, role, org_name, invite_link(token))
    sent = await send_email(ctx.admin_db, EmailMessage(
        organisation_id=ctx.organisation_id,
        to=data.email,
        to_name=f"{data.prenom} {data.nom}",
        subject=subject,
        html=html,
        entite_type=role,
        entite_id=data.entite_id,
        template="invitation_extranet",
    ))

    log_action(
        ctx,
        module=HistoriqueModule(role),
        action=HistoriqueAction.SENT,
        entite_type=role,
        entite_id=data.entite_id,
        entite_label=f"{data.prenom} {data.nom}",
        description=f"Invitation extranet envoyée à {data.prenom} {data.nom}",
        metadata={"email": data.email, "email_envoye": sent.success},
    )
    logger.info(f"[extranet] Invitation {acces.id} émise ({role}), email envoyé: {sent.success}")

    response = to_schema(ExtranetAccesResponse, acces)
    return InvitationResponse(**response.model_dump(), email_envoye=sent.success)


# =============================================================================
# LECTURE
# =============================================================================

@detail_action("extranet")
def get_extranet_acces(ctx: TenantContext, entite_type: str, entite_id: UUID):
    """Accès de la fiche, ou None si la personne n'a jamais été invitée."""
    acces = _find_acces(ctx, entite_type, entite_id)
    return to_schema(ExtranetAccesResponse, acces) if acces is not None else None
