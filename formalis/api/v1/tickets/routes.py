"""
Routes API pour le module Tickets.

Endpoints:
- GET   /tickets           : liste paginée et filtrée
- GET   /tickets/{id}      : fiche
- POST  /tickets           : création (numéro TIC-0001 attribué)
- PATCH /tickets/{id}      : statut, priorité, assignation
- POST  /tickets/archive   : archivage d'une sélection
- POST  /tickets/upload    : pièce jointe (multipart: file, ticket_id)
"""
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse

from formalis.api.v1.dependencies import PaginationParams
from formalis.api.v1.responses import delete_response, list_response, mutation_response
from formalis.api.v1.tickets.schemas import TicketList, UploadedFile
from formalis.api.v1.tickets.services import (
    archive_tickets,
    create_ticket,
    get_ticket,
    list_tickets,
    store_attachment,
    update_ticket,
)
from formalis.core.auth.tenant_resolver import AuthFailure, TenantResolution, get_tenant_resolution
from formalis.core.config import settings
from formalis.services.storage import LocalStorage, StorageError, UploadRejectedError, check_upload, get_storage

router = APIRouter(prefix="/tickets", tags=["Tickets"])

UPLOAD_ERROR = "Erreur lors de l'upload du fichier"


@router.get("", response_model=TicketList, summary="Liste des tickets")
def get_tickets(
        pagination: PaginationParams = Depends(),
        search: Optional[str] = Query(None, description="Recherche sur titre, numéro, auteur"),
        statut: Optional[str] = Query(None),
        priorite: Optional[str] = Query(None),
        categorie: Optional[str] = Query(None),
        entreprise_id: Optional[str] = Query(None),
        assignee_id: Optional[str] = Query(None),
        my_tickets: bool = Query(False, description="Seulement les tickets qui me sont assignés"),
        sort_by: Optional[str] = Query(None),
        sort_dir: str = Query("desc", pattern="^(asc|desc)$"),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    filters = {
        "statut": statut,
        "priorite": priorite,
        "categorie": categorie,
        "entreprise_id": entreprise_id,
        "assignee_id": assignee_id,
        "my_tickets": my_tickets,
    }
    return list_response(
        list_tickets(resolution, pagination.request, search, filters, sort_by, sort_dir)
    )


@router.post("/upload", response_model=UploadedFile, summary="Joindre un fichier")
async def upload_attachment(
        file: Optional[UploadFile] = File(None),
        ticket_id: Optional[str] = Form(None),
        resolution: TenantResolution = Depends(get_tenant_resolution),
        storage: LocalStorage = Depends(get_storage),
):
    """
    Images, PDF et documents Word, 10 Mo maximum.

    Le fichier est rangé sous {organisation}/{ticket_id ou drafts}/.
    """
    if isinstance(resolution, AuthFailure):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": resolution.error})

    filename = file.filename if file is not None else None
    content_type = file.content_type if file is not None else None
    try:
        # Type et taille annoncée contrôlés avant toute lecture du corps
        check_upload(filename, content_type, (file.size or 0) if file is not None else 0)
        content = await file.read(settings.UPLOAD_MAX_BYTES + 1)
        stored = store_attachment(resolution, storage, filename, content_type, content, ticket_id)
    except UploadRejectedError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": e.message})
    except StorageError:
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": UPLOAD_ERROR})

    return UploadedFile(url=stored.url, nom=stored.nom, taille=stored.taille, mime_type=stored.mime_type)


@router.post("/archive", summary="Archiver des tickets")
def post_archive(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin.**"""
    return delete_response(archive_tickets(resolution, payload))


@router.get("/{ticket_id}", summary="Détail d'un ticket")
def get_ticket_detail(
        ticket_id: UUID,
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return mutation_response(get_ticket(resolution, ticket_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Créer un ticket")
async def post_ticket(
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    return mutation_response(await create_ticket(resolution, payload), status.HTTP_201_CREATED)


@router.patch("/{ticket_id}", summary="Mettre à jour un ticket")
async def patch_ticket(
        ticket_id: UUID,
        payload: Dict[str, Any] = Body(...),
        resolution: TenantResolution = Depends(get_tenant_resolution),
):
    """**Requiert le rôle admin ou manager.**"""
    return mutation_response(await update_ticket(resolution, ticket_id, payload))
