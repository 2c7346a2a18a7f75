"""
Routes API pour le module Entreprises.

Endpoints:
- GET  /entreprises            : liste paginée
- GET  /entreprises/{id}       : fiche
- POST /entreprises            : création (numéro ENT-0001 attribué)
- PUT  /entreprises/{id}       : modification partielle
- POST /entreprises/archive    : archivage d'une sélection
- POST /entreprises/unarchive  : désarchivage d'une sélection
"""
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status

from formalis.api.v1.dependencies import PaginationParams
from formalis.api.v1.entreprises.schemas import EntrepriseList
from formalis.api.v1.entreprises.services import (
    archive_entreprises,
    create_entreprise,
    get_entreprise,
    list_entreprises,
    unarchive_entreprises,
    update_entreprise,
)
from formalis.api.v1.responses import delete_response, list_response, mutation_response
from formalis.core.auth.tenant_resolver import TenantResolution, get_tenant_resolution

router = APIRouter(prefix="/entreprises", tags=["Entreprises"])


@router.get("", response_model=EntrepriseList, summary="Liste des entreprises")
def get_entreprises(
        pagination: PaginationParams = Depends(),
        search: Optional[str] = Query(None, description="Recherche sur nom, SIRET, email"),
        show_archived: bool = Query(False),
        sort_by: Optional[str] = Query(None),
        sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return list_response(
        list_entreprises(resolution, pagination.request, search, show_archived, sort_by, sort_dir)
    )


@router.post("/archive", summary="Archiver des entreprises")
def post_archive(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin.**"""
    return delete_response(archive_entreprises(resolution, payload))


@router.post("/unarchive", summary="Désarchiver des entreprises")
def post_unarchive(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin.**"""
    return delete_response(unarchive_entreprises(resolution, payload))


@router.get("/{entreprise_id}", summary="Détail d'une entreprise")
def get_entreprise_detail(
        entreprise_id: UUID,
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return mutation_response(get_entreprise(resolution, entreprise_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Créer une entreprise")
def post_entreprise(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin ou manager.**"""
    return mutation_response(create_entreprise(resolution, payload), status.HTTP_201_CREATED)


@router.put("/{entreprise_id}", summary="Modifier une entreprise")
def put_entreprise(
        entreprise_id: UUID,
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin ou manager.**"""
    return mutation_response(update_entreprise(resolution, entreprise_id, payload))
