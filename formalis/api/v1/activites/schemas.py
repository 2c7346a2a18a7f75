"""
Schémas Pydantic pour le module Activités.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from formalis.services.validation import FormSchema, required_text


class ActiviteCreate(FormSchema):
    """Une activité peut n'être rattachée à aucune fiche (type et id vides)."""
    contenu: required_text("Le contenu est requis") = None
    entite_type: Optional[str] = None
    entite_id: Optional[UUID] = None


class ActiviteFilters(FormSchema):
    entite_type: Optional[str] = None
    entite_id: Optional[UUID] = None


class ActiviteResponse(BaseModel):
    id: UUID
    contenu: str
    entite_type: Optional[str] = None
    entite_id: Optional[UUID] = None
    auteur_id: Optional[UUID] = None
    auteur_nom: Optional[str] = None
    created_at: datetime


class ActiviteList(BaseModel):
    data: List[ActiviteResponse]
    count: int
    error: Optional[str] = None
