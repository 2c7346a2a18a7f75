"""
Journalisation des événements dans l'historique.

Effet de bord best-effort : l'insertion se fait dans une transaction
distincte, après le commit de la mutation principale. Un échec est
journalisé puis ignoré ; il n'annule jamais l'action qui l'a déclenché.

Usage:
    log_historique(
        ctx.admin_db,
        HistoriqueEntry(
            organisation_id=ctx.organisation_id,
            user_id=ctx.user_id,
            user_nom=ctx.user_nom,
            user_role=ctx.role,
            module=HistoriqueModule.SALLE,
            action=HistoriqueAction.CREATED,
            entite_type="salle",
            entite_id=salle.id,
            entite_label=salle.nom,
            description=f'Salle "{salle.nom}" créée',
        ),
    )
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formalis.core.auth.tenant_resolver import TenantContext
from formalis.models.enums import HistoriqueAction, HistoriqueModule, HistoriqueOrigine
from formalis.models.historique.historique_event import HistoriqueEvent

logger = logging.getLogger(__name__)

# Colonnes techniques ignorées par compute_changes
IGNORED_FIELDS = {"created_at", "updated_at"}


@dataclass
class HistoriqueEntry:
    """Paramètres d'un événement à journaliser."""
    organisation_id: UUID
    user_id: Optional[UUID]
    module: HistoriqueModule
    action: HistoriqueAction
    entite_type: str
    entite_id: UUID
    description: str
    user_nom: Optional[str] = None
    user_role: Optional[Union[str, Enum]] = None
    origine: HistoriqueOrigine = HistoriqueOrigine.BACKOFFICE
    entite_label: Optional[str] = None
    entreprise_id: Optional[UUID] = None
    objet_href: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    agence_id: Optional[UUID] = None
    agence_nom: Optional[str] = None

    def to_model(self) -> HistoriqueEvent:
        role = self.user_role.value if isinstance(self.user_role, Enum) else self.user_role
        return HistoriqueEvent(
            organisation_id=self.organisation_id,
            user_id=self.user_id,
            user_nom=self.user_nom,
            user_role=role,
            origine=self.origine.value,
            module=self.module.value,
            action=self.action.value,
            entite_type=self.entite_type,
            entite_id=self.entite_id,
            entite_label=self.entite_label,
            entreprise_id=self.entreprise_id,
            description=self.description,
            objet_href=self.objet_href,
            event_metadata=_json_safe(self.metadata),
            agence_id=self.agence_id,
            agence_nom=self.agence_nom,
        )


def _json_safe(value: Dict[str, Any]) -> Dict[str, Any]:
    """Rend les métadonnées sérialisables en JSON (UUID, dates -> str)."""
    return json.loads(json.dumps(value or {}, default=str))


def log_historique(db: Session, entry: HistoriqueEntry) -> None:
    """Insère un événement. Ne lève jamais."""
    log_historique_batch(db, [entry])


def log_historique_batch(db: Session, entries: List[HistoriqueEntry]) -> None:
    """Insère plusieurs événements (opérations groupées). Ne lève jamais."""
    if not entries:
        return

    try:
        db.add_all([entry.to_model() for entry in entries])
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[historique] Échec de journalisation ({len(entries)} événement(s)): {e}")


def compute_changes(
        old_data: Dict[str, Any],
        new_data: Dict[str, Any],
        field_labels: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Différence entre deux états d'une ligne, pour les métadonnées.

    Returns:
        {"changed_fields": [libellés], "old_values": {...}, "new_values": {...}}
    """
    changed_fields: List[str] = []
    old_values: Dict[str, Any] = {}
    new_values: Dict[str, Any] = {}

    for key, new_val in new_data.items():
        if key in IGNORED_FIELDS:
            continue
        old_val = old_data.get(key)
        if old_val != new_val:
            changed_fields.append((field_labels or {}).get(key, key))
            old_values[key] = old_val
            new_values[key] = new_val

    return {
        "changed_fields": changed_fields,
        "old_values": old_values,
        "new_values": new_values,
    }


def log_action(ctx: TenantContext, **fields: Any) -> None:
    """
    Journalise une action du tenant courant (auteur = utilisateur résolu).

    Usage:
        log_action(ctx, module=HistoriqueModule.SALLE, action=HistoriqueAction.CREATED,
                   entite_type="salle", entite_id=salle.id, description="...")
    """
    log_historique(
        ctx.admin_db,
        HistoriqueEntry(
            organisation_id=ctx.organisation_id,
            user_id=ctx.user_id,
            user_nom=ctx.user_nom,
            user_role=ctx.role,
            **fields,
        ),
    )
