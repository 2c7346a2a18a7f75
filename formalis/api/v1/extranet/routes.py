"""
Routes API pour le module Extranet.

Endpoints:
- POST /extranet/invite : invitation d'un formateur, apprenant ou contact client
- GET  /extranet/acces  : statut d'accès d'une fiche
"""
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query

from formalis.api.v1.extranet.services import get_extranet_acces, invite_to_extranet
from formalis.api.v1.responses import mutation_response
from formalis.core.auth.provider import AuthProvider, get_auth_provider
from formalis.core.auth.tenant_resolver import TenantResolution, get_tenant_resolution
from formalis.models.enums import ExtranetRole

router = APIRouter(prefix="/extranet", tags=["Extranet"])


@router.post("/invite", summary="Inviter sur l'extranet")
async def post_invite(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
        provider: AuthProvider = Depends(get_auth_provider),
):
    """
    **Requiert le rôle admin ou manager.**

    Le lien envoyé est valable 24 heures et ne sert qu'une fois.
    """
    return mutation_response(await invite_to_extranet(resolution, payload, provider))


@router.get("/acces", summary="Accès extranet d'une fiche")
def get_acces(
        entite_type: ExtranetRole = Query(...),
        entite_id: UUID = Query(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return mutation_response(get_extranet_acces(resolution, entite_type.value, entite_id))
