"""
Schémas Pydantic pour le module Entreprises.

Contient les schémas pour :
- EntrepriseCreate / EntrepriseUpdate : entrées de formulaire
- EntrepriseResponse : fiche publique
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from formalis.services.validation import FormSchema, optional_email, required_text


class EntrepriseSortField(str, Enum):
    """Colonnes de tri autorisées."""
    NUMERO_AFFICHAGE = "numero_affichage"
    NOM = "nom"
    VILLE = "ville"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


# =============================================================================
# ENTRÉES
# =============================================================================

class EntrepriseCreate(FormSchema):
    nom: required_text("Le nom est requis", max_length=255) = None
    siret: Optional[str] = None
    email: optional_email() = None
    telephone: Optional[str] = None
    adresse: Optional[str] = None
    code_postal: Optional[str] = None
    ville: Optional[str] = None


class EntrepriseUpdate(FormSchema):
    """Mise à jour partielle : seuls les champs transmis sont modifiés."""
    nom: Optional[str] = None
    siret: Optional[str] = None
    email: optional_email() = None
    telephone: Optional[str] = None
    adresse: Optional[str] = None
    code_postal: Optional[str] = None
    ville: Optional[str] = None

    @field_validator("nom")
    @classmethod
    def nom_not_empty(cls, v: Optional[str]) -> str:
        # Exécuté seulement si "nom" est transmis
        if v is None or not v.strip():
            raise ValueError("Le nom est requis")
        return v.strip()


# =============================================================================
# SORTIES
# =============================================================================

class EntrepriseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    numero_affichage: str
    nom: str
    siret: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = None
    adresse: Optional[str] = None
    code_postal: Optional[str] = None
    ville: Optional[str] = None
    archived_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class EntrepriseList(BaseModel):
    data: List[EntrepriseResponse]
    count: int
    error: Optional[str] = None
