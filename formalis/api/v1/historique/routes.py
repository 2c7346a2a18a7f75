"""
Routes API pour le module Historique.

Endpoints:
- GET /historique : événements d'une fiche ou d'une entreprise
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from formalis.api.v1.dependencies import PaginationParams
from formalis.api.v1.historique.schemas import HistoriqueList
from formalis.api.v1.historique.services import get_historique
from formalis.api.v1.responses import list_response
from formalis.core.auth.tenant_resolver import TenantResolution, get_tenant_resolution

router = APIRouter(prefix="/historique", tags=["Historique"])


@router.get(
    "",
    response_model=HistoriqueList,
    summary="Historique d'une fiche",
    description="Mode `entity` (entite_type + entite_id) ou `entreprise` (entreprise_id).",
)
def list_historique(
        pagination: PaginationParams = Depends(),
        mode: str = Query("entity", description="entity | entreprise"),
        entite_type: Optional[str] = Query(None),
        entite_id: Optional[str] = Query(None),
        entreprise_id: Optional[str] = Query(None),
        module: Optional[str] = Query(None),
        action: Optional[str] = Query(None),
        origine: Optional[str] = Query(None),
        utilisateur: Optional[str] = Query(None, description="Sous-chaîne du nom de l'utilisateur"),
        date_debut: Optional[str] = Query(None, description="YYYY-MM-DD (inclus)"),
        date_fin: Optional[str] = Query(None, description="YYYY-MM-DD (inclus)"),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """Liste paginée (25 par page) des événements, du plus récent au plus ancien."""
    params = {
        "mode": mode,
        "entite_type": entite_type,
        "entite_id": entite_id,
        "entreprise_id": entreprise_id,
        "module": module,
        "action": action,
        "origine": origine,
        "utilisateur": utilisateur,
        "date_debut": date_debut,
        "date_fin": date_fin,
    }
    return list_response(get_historique(resolution, params, pagination.request))
