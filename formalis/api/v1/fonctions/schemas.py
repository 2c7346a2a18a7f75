"""
Schémas Pydantic pour le module Fonctions.
"""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from formalis.services.validation import FormSchema, required_text


class FonctionInput(FormSchema):
    nom: required_text("Le nom est requis", max_length=100) = None


class FonctionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    nom: str
    ordre: int


class FonctionList(BaseModel):
    data: List[FonctionResponse]
    count: int
    error: Optional[str] = None
