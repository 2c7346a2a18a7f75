"""
Routes API pour le module Salles.

Endpoints:
- GET  /salles         : liste paginée des salles actives
- GET  /salles/all     : toutes les salles actives (sélecteurs)
- POST /salles         : création
- PUT  /salles/{id}    : modification
- POST /salles/delete  : suppression logique d'une sélection
"""
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status

from formalis.api.v1.dependencies import PaginationParams
from formalis.api.v1.responses import delete_response, list_response, mutation_response
from formalis.api.v1.salles.schemas import SalleList
from formalis.api.v1.salles.services import (
    create_salle,
    delete_salles,
    list_all_salles,
    list_salles,
    update_salle,
)
from formalis.core.auth.tenant_resolver import TenantResolution, get_tenant_resolution

router = APIRouter(prefix="/salles", tags=["Salles"])


@router.get("", response_model=SalleList, summary="Liste des salles")
def get_salles(
        pagination: PaginationParams = Depends(),
        search: Optional[str] = Query(None, description="Recherche sur le nom ou l'adresse"),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return list_response(list_salles(resolution, pagination.request, search))


@router.get("/all", summary="Toutes les salles actives")
def get_all_salles(resolution: TenantResolution = Depends(get_tenant_resolution)):
    return list_response(list_all_salles(resolution))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Créer une salle")
def post_salle(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin ou manager.**"""
    return mutation_response(create_salle(resolution, payload), status.HTTP_201_CREATED)


@router.put("/{salle_id}", summary="Modifier une salle")
def put_salle(
        salle_id: UUID,
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin ou manager.**"""
    return mutation_response(update_salle(resolution, salle_id, payload))


@router.post("/delete", summary="Supprimer des salles")
def post_delete_salles(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """
    Suppression logique (actif = False).

    **Requiert le rôle admin.**
    """
    return delete_response(delete_salles(resolution, payload))
