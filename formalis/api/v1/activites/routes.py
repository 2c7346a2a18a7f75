"""
Routes API pour le module Activités.

Endpoints:
- GET  /activites : liste paginée (optionnellement pour une fiche)
- POST /activites : nouvelle activité
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from formalis.api.v1.activites.schemas import ActiviteList
from formalis.api.v1.activites.services import create_activite, list_activites
from formalis.api.v1.dependencies import PaginationParams
from formalis.api.v1.responses import list_response, mutation_response
from formalis.core.auth.tenant_resolver import TenantResolution, get_tenant_resolution

router = APIRouter(prefix="/activites", tags=["Activités"])


@router.get("", response_model=ActiviteList, summary="Liste des activités")
def get_activites(
        pagination: PaginationParams = Depends(),
        entite_type: Optional[str] = Query(None),
        entite_id: Optional[str] = Query(None),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """Filtre sur une fiche seulement si entite_type et entite_id sont fournis ensemble."""
    return list_response(list_activites(resolution, entite_type, entite_id, pagination.request))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Créer une activité")
def post_activite(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return mutation_response(create_activite(resolution, payload), status.HTTP_201_CREATED)
