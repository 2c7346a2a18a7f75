"""
Routes API pour le module Auth.

Endpoints:
- GET  /auth/extranet-invite?token=      : lien d'invitation extranet
- GET  /auth/confirm?token_hash=&type=   : lien émis par le fournisseur
- POST /auth/set-password                : premier mot de passe (Bearer requis)

Les deux GET répondent par une redirection vers le front (APP_URL) ;
la session ouverte est posée en cookies HTTP-only.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from formalis.api.v1.auth.services import AuthRedirect, confirm_provider_link, redeem_invite_token, set_password
from formalis.api.v1.responses import mutation_response
from formalis.core.auth.provider import AuthProvider, get_auth_provider
from formalis.core.auth.user_auth import Identity, get_current_identity
from formalis.core.config import settings
from formalis.database.session_rls import get_db_no_rls

router = APIRouter(prefix="/auth", tags=["Authentification"])

ACCESS_TOKEN_COOKIE = "formalis-access-token"
REFRESH_TOKEN_COOKIE = "formalis-refresh-token"
REFRESH_TOKEN_MAX_AGE = 30 * 24 * 3600  # 30 jours


def _redirect(outcome: AuthRedirect) -> RedirectResponse:
    """Redirection vers le front, avec les cookies de session si une session a été ouverte."""
    response = RedirectResponse(url=f"{settings.APP_URL.rstrip('/')}{outcome.path}")
    session = outcome.session
    if session is not None:
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            session.access_token,
            max_age=session.expires_in,
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
        )
        if session.refresh_token:
            response.set_cookie(
                REFRESH_TOKEN_COOKIE,
                session.refresh_token,
                max_age=REFRESH_TOKEN_MAX_AGE,
                httponly=True,
                secure=settings.is_production,
                samesite="lax",
            )
    return response


@router.get("/extranet-invite", summary="Lien d'invitation extranet")
async def extranet_invite(
        token: Optional[str] = Query(None),
        admin_db: Session = Depends(get_db_no_rls),
        provider: AuthProvider = Depends(get_auth_provider),
):
    """
    Jeton valable 24 heures et à usage unique.

    Première connexion : redirection vers /set-password?next=<espace>.
    """
    return _redirect(await redeem_invite_token(admin_db, provider, token))


@router.get("/confirm", summary="Confirmation d'un lien du fournisseur")
async def confirm(
        token_hash: Optional[str] = Query(None),
        type: Optional[str] = Query(None),
        admin_db: Session = Depends(get_db_no_rls),
        provider: AuthProvider = Depends(get_auth_provider),
):
    return _redirect(await confirm_provider_link(admin_db, provider, token_hash, type))


@router.post("/set-password", summary="Définir son mot de passe")
async def post_set_password(
        payload: Dict[str, Any] = Body(...),
        identity: Identity = Depends(get_current_identity),
        admin_db: Session = Depends(get_db_no_rls),
        provider: AuthProvider = Depends(get_auth_provider),
):
    """Active les accès extranet `invite` / `en_attente` de l'utilisateur."""
    return mutation_response(await set_password(admin_db, provider, identity, payload))
