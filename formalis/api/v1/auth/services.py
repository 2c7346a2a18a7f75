"""
Services du module Auth.

Lien d'invitation extranet (jeton maison, 24 h, usage unique) :

    token absent                       -> /login?error=missing_params
    token inconnu, consommé ou expiré  -> /login?error=invalid_or_expired_link
    compte fournisseur introuvable     -> /login?error=no_access
    session refusée par le fournisseur -> /login?error=invalid_or_expired_link
    statut invite | en_attente         -> /set-password?next=<espace du rôle>
    statut actif                       -> <espace du rôle>

Le jeton est effacé dès qu'une session a été ouverte.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formalis.api.v1.auth.schemas import SetPasswordInput, SetPasswordResponse
from formalis.core.auth.provider import AuthProvider, AuthProviderError, ProviderSession
from formalis.core.auth.user_auth import Identity
from formalis.core.results import ErrorKind, MutationResult
from formalis.models.enums import EXTRANET_ROUTES, ExtranetRole, ExtranetStatut, parse_enum
from formalis.models.extranet.extranet_acces import ExtranetAcces
from formalis.models.organisation.utilisateur import Utilisateur
from formalis.services.actions import storage_message
from formalis.services.validation import validate_input

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
SET_PASSWORD_PATH = "/set-password"
BACKOFFICE_PATH = "/"

# Statuts pour lesquels un lien d'invitation peut ouvrir une session
REDEEMABLE = (
    ExtranetStatut.INVITE.value,
    ExtranetStatut.EN_ATTENTE.value,
    ExtranetStatut.ACTIF.value,
)

FIRST_LOGIN = (ExtranetStatut.INVITE.value, ExtranetStatut.EN_ATTENTE.value)


class LoginError(str, Enum):
    MISSING_PARAMS = "missing_params"
    INVALID_OR_EXPIRED_LINK = "invalid_or_expired_link"
    NO_ACCESS = "no_access"


@dataclass
class AuthRedirect:
    """Destination après un lien d'authentification, avec la session ouverte le cas échéant."""
    path: str
    session: Optional[ProviderSession] = None

    @classmethod
    def login_error(cls, error: LoginError) -> "AuthRedirect":
        return cls(path=f"{LOGIN_PATH}?error={error.value}")


def landing_path(acces: ExtranetAcces) -> Optional[str]:
    """Espace du rôle, précédé de la définition du mot de passe à la première connexion."""
    role = parse_enum(ExtranetRole, acces.role)
    route = EXTRANET_ROUTES.get(role) if isinstance(role, ExtranetRole) else None
    if route is None:
        return None
    if acces.statut in FIRST_LOGIN:
        return f"{SET_PASSWORD_PATH}?next={quote(route, safe='/')}"
    return route


def _provider_email(user: Dict[str, Any]) -> Optional[str]:
    return user.get("email") or (user.get("user") or {}).get("email")


# =============================================================================
# LIEN D'INVITATION EXTRANET
# =============================================================================

async def redeem_invite_token(admin_db: Session, provider: AuthProvider, token: Optional[str]) -> AuthRedirect:
    """Échange un jeton d'invitation contre une session. Ne lève pas."""
    if not token:
        return AuthRedirect.login_error(LoginError.MISSING_PARAMS)

    try:
        acces = admin_db.execute(
            select(ExtranetAcces).where(
                ExtranetAcces.invite_token == token,
                ExtranetAcces.statut.in_(REDEEMABLE),
            )
        ).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"[extranet-invite] Lecture du jeton impossible: {e}")
        return AuthRedirect.login_error(LoginError.INVALID_OR_EXPIRED_LINK)

    if acces is None:
        logger.info("[extranet-invite] Jeton inconnu ou déjà utilisé")
        return AuthRedirect.login_error(LoginError.INVALID_OR_EXPIRED_LINK)

    if acces.is_token_expired():
        logger.info(f"[extranet-invite] Jeton expiré pour l'accès {acces.id}: {acces.invite_token_expires_at}")
        return AuthRedirect.login_error(LoginError.INVALID_OR_EXPIRED_LINK)

    target = landing_path(acces)
    if acces.user_id is None or target is None:
        return AuthRedirect.login_error(LoginError.NO_ACCESS)

    try:
        user = await provider.get_user_by_id(str(acces.user_id))
    except AuthProviderError as e:
        logger.error(f"[extranet-invite] Compte {acces.user_id} introuvable: {e.message}")
        return AuthRedirect.login_error(LoginError.NO_ACCESS)

    email = _provider_email(user)
    if not email:
        return AuthRedirect.login_error(LoginError.NO_ACCESS)

    try:
        link = await provider.generate_link(email)
        session = await provider.verify_otp(link.hashed_token, "magiclink")
    except AuthProviderError as e:
        logger.error(f"[extranet-invite] Session refusée pour {acces.user_id}: {e.message}")
        return AuthRedirect.login_error(LoginError.INVALID_OR_EXPIRED_LINK)

    acces.consume_token()
    try:
        admin_db.commit()
    except SQLAlchemyError as e:
        admin_db.rollback()
        logger.error(f"[extranet-invite] Consommation du jeton impossible pour {acces.id}: {e}")
        return AuthRedirect.login_error(LoginError.INVALID_OR_EXPIRED_LINK)

    logger.info(f"[extranet-invite] Session ouverte pour l'accès {acces.id} -> {target}")
    return AuthRedirect(path=target, session=session)


# =============================================================================
# LIEN DU FOURNISSEUR (token_hash)
# =============================================================================

def _redirect_for_user(admin_db: Session, user_id: UUID) -> Optional[str]:
    """Back-office si l'utilisateur est membre, sinon son espace extranet."""
    if admin_db.get(Utilisateur, user_id) is not None:
        return BACKOFFICE_PATH
    acces = admin_db.execute(
        select(ExtranetAcces)
        .where(ExtranetAcces.user_id == user_id, ExtranetAcces.statut.in_(REDEEMABLE))
        .order_by(ExtranetAcces.created_at.desc())
    ).scalars().first()
    return landing_path(acces) if acces is not None else None


async def confirm_provider_link(
        admin_db: Session,
        provider: AuthProvider,
        token_hash: Optional[str],
        otp_type: Optional[str],
) -> AuthRedirect:
    """Vérifie un token_hash émis par le fournisseur (magiclink, recovery, invite...)."""
    if not token_hash or not otp_type:
        return AuthRedirect.login_error(LoginError.MISSING_PARAMS)

    try:
        session = await provider.verify_otp(token_hash, otp_type)
    except AuthProviderError as e:
        logger.info(f"[auth/confirm] Lien refusé: {e.message}")
        return AuthRedirect.login_error(LoginError.INVALID_OR_EXPIRED_LINK)

    target = None
    if session.user_id:
        try:
            target = _redirect_for_user(admin_db, UUID(session.user_id))
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"[auth/confirm] Destination introuvable pour {session.user_id}: {e}")
    if target is None:
        return AuthRedirect.login_error(LoginError.NO_ACCESS)
    return AuthRedirect(path=target, session=session)


# =============================================================================
# PREMIER MOT DE PASSE
# =============================================================================

def _safe_next(next_path: Optional[str]) -> Optional[str]:
    """Chemin relatif uniquement (pas de redirection vers un autre domaine)."""
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return None


async def set_password(
        admin_db: Session,
        provider: AuthProvider,
        identity: Identity,
        payload: Dict[str, Any],
) -> MutationResult:
    """
    Change le mot de passe puis active les accès extranet en attente.

    invite | en_attente -> actif (active_le renseigné).
    """
    data, errors = validate_input(SetPasswordInput, payload)
    if errors:
        return MutationResult.field_errors(errors)

    try:
        await provider.update_password(identity.access_token, data.password)
    except AuthProviderError as e:
        logger.error(f"[auth/set-password] Échec pour {identity.user_id}: {e.message}")
        return MutationResult.form_error(
            f"Erreur lors de la mise à jour du mot de passe : {e.message}", ErrorKind.UPSTREAM
        )

    try:
        pending: List[ExtranetAcces] = list(admin_db.execute(
            select(ExtranetAcces).where(
                ExtranetAcces.user_id == identity.user_id,
                ExtranetAcces.statut.in_(FIRST_LOGIN),
            )
        ).scalars().all())
        for acces in pending:
            acces.activate()
        admin_db.commit()
    except SQLAlchemyError as e:
        admin_db.rollback()
        logger.error(f"[auth/set-password] Activation impossible pour {identity.user_id}: {e}")
        return MutationResult.form_error(storage_message(e), ErrorKind.STORAGE)

    redirect = _safe_next(data.next) or _redirect_for_user(admin_db, identity.user_id) or BACKOFFICE_PATH
    if redirect.startswith(SET_PASSWORD_PATH):
        # Accès désormais actif : directement l'espace du rôle
        redirect = _redirect_for_user(admin_db, identity.user_id) or BACKOFFICE_PATH
    return MutationResult.success(SetPasswordResponse(activated=len(pending), redirect=redirect))
