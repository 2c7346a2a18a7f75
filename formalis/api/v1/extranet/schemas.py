"""
Schémas Pydantic pour le module Extranet.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from formalis.models.enums import ExtranetRole
from formalis.services.validation import FormSchema, required_email, required_text


class InviteInput(FormSchema):
    """Personne à inviter ; son rôle extranet est le type de sa fiche."""
    entite_type: ExtranetRole
    entite_id: UUID
    email: required_email("Email invalide") = None
    prenom: required_text("Le prénom est requis", max_length=100) = None
    nom: required_text("Le nom est requis", max_length=100) = None


class ExtranetAccesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: Optional[UUID] = None
    role: str
    statut: str
    invite_le: Optional[datetime] = None
    active_le: Optional[datetime] = None


class InvitationResponse(ExtranetAccesResponse):
    email_envoye: bool = False
