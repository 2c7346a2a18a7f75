"""
Schémas Pydantic pour le module Tickets.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from formalis.models.enums import TicketCategorie, TicketPriorite, TicketStatut
from formalis.services.validation import FormSchema, required_text


class TicketSortField(str, Enum):
    """Colonnes de tri autorisées."""
    NUMERO_AFFICHAGE = "numero_affichage"
    TITRE = "titre"
    STATUT = "statut"
    PRIORITE = "priorite"
    CATEGORIE = "categorie"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


# =============================================================================
# ENTRÉES
# =============================================================================

class TicketCreate(FormSchema):
    model_config = ConfigDict(use_enum_values=True)

    titre: required_text("Le titre est requis", max_length=255) = None
    description: Optional[str] = None
    priorite: TicketPriorite = TicketPriorite.NORMALE
    categorie: Optional[TicketCategorie] = None
    entreprise_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None


class TicketUpdate(FormSchema):
    """Mise à jour partielle (statut, priorité, rattachements)."""
    model_config = ConfigDict(use_enum_values=True)

    statut: Optional[TicketStatut] = None
    priorite: Optional[TicketPriorite] = None
    categorie: Optional[TicketCategorie] = None
    entreprise_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None


class TicketFilters(FormSchema):
    """Filtres de la liste (valeurs hors énumération refusées)."""
    statut: Optional[TicketStatut] = None
    priorite: Optional[TicketPriorite] = None
    categorie: Optional[TicketCategorie] = None
    entreprise_id: Optional[UUID] = None
    assignee_id: Optional[UUID] = None
    my_tickets: bool = False


# =============================================================================
# SORTIES
# =============================================================================

class TicketRow(BaseModel):
    id: UUID
    numero_affichage: str
    titre: str
    description: Optional[str] = None
    statut: str
    priorite: str
    categorie: Optional[str] = None
    auteur_nom: Optional[str] = None
    auteur_type: Optional[str] = None
    entreprise_id: Optional[UUID] = None
    entreprise_nom: Optional[str] = None
    assignee_id: Optional[UUID] = None
    assignee_nom: Optional[str] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class TicketList(BaseModel):
    data: List[TicketRow]
    count: int
    error: Optional[str] = None


class UploadedFile(BaseModel):
    url: str
    nom: str
    taille: int
    mime_type: str
