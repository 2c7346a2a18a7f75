"""
Routes API pour le module Fonctions.

Endpoints:
- GET    /fonctions       : liste ordonnée (initialisée au premier appel)
- POST   /fonctions       : création
- PUT    /fonctions/{id}  : renommage
- DELETE /fonctions/{id}  : suppression
"""
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status

from formalis.api.v1.fonctions.schemas import FonctionList
from formalis.api.v1.fonctions.services import create_fonction, delete_fonction, list_fonctions, update_fonction
from formalis.api.v1.responses import delete_response, list_response, mutation_response
from formalis.core.auth.tenant_resolver import TenantResolution, get_tenant_resolution

router = APIRouter(prefix="/fonctions", tags=["Fonctions"])


@router.get("", response_model=FonctionList, summary="Liste des fonctions")
def get_fonctions(resolution: TenantResolution = Depends(get_tenant_resolution)):
    return list_response(list_fonctions(resolution))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Créer une fonction")
def post_fonction(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin.** Un nom déjà utilisé répond 409."""
    return mutation_response(create_fonction(resolution, payload), status.HTTP_201_CREATED)


@router.put("/{fonction_id}", summary="Renommer une fonction")
def put_fonction(
        fonction_id: UUID,
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return mutation_response(update_fonction(resolution, fonction_id, payload))


@router.delete("/{fonction_id}", summary="Supprimer une fonction")
def remove_fonction(
        fonction_id: UUID,
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return delete_response(delete_fonction(resolution, fonction_id))
