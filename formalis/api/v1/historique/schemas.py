"""
Schémas Pydantic pour le module Historique.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, model_validator

from formalis.models.enums import HistoriqueAction, HistoriqueModule, HistoriqueOrigine
from formalis.services.validation import FormSchema


class HistoriqueMode(str, Enum):
    ENTITY = "entity"            # événements directs d'une fiche
    ENTREPRISE = "entreprise"    # événements rattachés à une entreprise


# =============================================================================
# ENTRÉE
# =============================================================================

class HistoriqueQuery(FormSchema):
    """Portée et filtres d'une lecture de l'historique."""
    mode: HistoriqueMode = HistoriqueMode.ENTITY

    # Portée
    entite_type: Optional[str] = None
    entite_id: Optional[UUID] = None
    entreprise_id: Optional[UUID] = None

    # Filtres
    module: Optional[HistoriqueModule] = None
    action: Optional[HistoriqueAction] = None
    origine: Optional[HistoriqueOrigine] = None
    utilisateur: Optional[str] = None
    date_debut: Optional[date] = None
    date_fin: Optional[date] = None

    @model_validator(mode="after")
    def check_scope(self) -> "HistoriqueQuery":
        if self.mode == HistoriqueMode.ENTITY and not (self.entite_type and self.entite_id):
            raise ValueError("entite_type et entite_id sont requis en mode entity")
        if self.mode == HistoriqueMode.ENTREPRISE and not self.entreprise_id:
            raise ValueError("entreprise_id est requis en mode entreprise")
        return self


# =============================================================================
# SORTIE
# =============================================================================

class HistoriqueEventResponse(BaseModel):
    id: UUID
    date: datetime
    module: Union[HistoriqueModule, str]
    module_label: Optional[str] = None
    action: Union[HistoriqueAction, str]
    action_label: Optional[str] = None
    description: str
    entite_label: Optional[str] = None
    entite_id: Optional[UUID] = None
    objet_href: Optional[str] = None
    user_nom: Optional[str] = None
    user_role: Optional[str] = None
    origine: Union[HistoriqueOrigine, str]
    origine_label: Optional[str] = None
    agence_nom: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class HistoriqueList(BaseModel):
    data: List[HistoriqueEventResponse]
    count: int
    error: Optional[str] = None
