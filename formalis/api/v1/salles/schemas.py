"""
Schémas Pydantic pour le module Salles.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from formalis.services.validation import FormSchema, required_text


class SalleInput(FormSchema):
    """Création et modification (remplacement complet des champs)."""
    nom: required_text("Le nom est requis", max_length=255) = None
    adresse: Optional[str] = None
    capacite: Optional[int] = None
    equipements: Optional[str] = None

    @field_validator("capacite")
    @classmethod
    def validate_capacite(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("La capacité doit être un nombre positif")
        return v


class SalleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    nom: str
    adresse: Optional[str] = None
    capacite: Optional[int] = None
    equipements: Optional[str] = None
    actif: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class SalleSummary(BaseModel):
    """Forme courte pour les listes déroulantes."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    nom: str
    adresse: Optional[str] = None
    capacite: Optional[int] = None


class SalleList(BaseModel):
    data: List[SalleResponse]
    count: int
    error: Optional[str] = None
