"""
Modèle HistoriqueEvent - Journal d'activité multi-modules.

Chaque mutation métier ajoute un événement (effet de bord best-effort).

IMPORTANT :
- Événements immuables (pas de UPDATE/DELETE dans les flux normaux)
- Insertion via la session élevée (hors RLS)
- module / action / origine sont stockés en texte ; la lecture les
  convertit en énumérations avec repli sur la valeur brute
"""

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.enums import HistoriqueOrigine
from formalis.models.mixins import OrganisationScopedMixin, UUIDPrimaryKeyMixin, utcnow
from formalis.models.types import JSONMetadata


class HistoriqueEvent(UUIDPrimaryKeyMixin, OrganisationScopedMixin, Base):
    """
    Événement de l'historique.

    Attributes:
        user_id / user_nom / user_role: Auteur (dénormalisé pour l'affichage)
        origine: backoffice | extranet | systeme
        module: Module métier (entreprise, salle, ticket...)
        action: created, updated, archived, status_changed...
        entite_type / entite_id / entite_label: Objet concerné
        entreprise_id: Entreprise liée (vue "historique de l'entreprise")
        description: Phrase lisible
        objet_href: Lien front vers l'objet
        event_metadata: Détails (colonne `metadata`, ex: champs modifiés)
        agence_id / agence_nom: Agence de l'organisation, si applicable
    """

    __tablename__ = "historique_events"
    __table_args__ = (
        Index("ix_historique_entite", "organisation_id", "entite_type", "entite_id"),
        Index("ix_historique_entreprise", "organisation_id", "entreprise_id"),
        {"comment": "Journal d'activité (immuable)"},
    )

    # --- Qui ---

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("utilisateurs.id", ondelete="SET NULL"),
        nullable=True,
    )

    user_nom: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user_role: Mapped[str | None] = mapped_column(String(30), nullable=True)

    origine: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=HistoriqueOrigine.BACKOFFICE.value,
    )

    # --- Quoi ---

    module: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    action: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    # --- Sur quoi ---

    entite_type: Mapped[str] = mapped_column(String(30), nullable=False)

    entite_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    entite_label: Mapped[str | None] = mapped_column(String(255), nullable=True)

    entreprise_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    objet_href: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # --- Détails ---

    event_metadata: Mapped[Dict[str, Any] | None] = mapped_column(
        "metadata",
        JSONMetadata,
        nullable=True,
        default=dict,
    )

    agence_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    agence_nom: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # --- Horodatage ---

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<HistoriqueEvent(id={self.id}, module='{self.module}', action='{self.action}')>"
