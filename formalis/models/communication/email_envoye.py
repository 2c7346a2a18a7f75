"""
Modèle EmailEnvoye - Journal des emails transactionnels.

Une ligne par tentative d'envoi, réussie (`envoye`) ou non (`erreur`).
"""

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.mixins import OrganisationScopedMixin, UUIDPrimaryKeyMixin, utcnow
from formalis.models.types import JSONMetadata


class EmailEnvoye(UUIDPrimaryKeyMixin, OrganisationScopedMixin, Base):
    """Email envoyé (ou tenté) via le fournisseur d'emails."""

    __tablename__ = "emails_envoyes"
    __table_args__ = {"comment": "Journal des emails envoyés"}

    destinataire_email: Mapped[str] = mapped_column(String(255), nullable=False)

    destinataire_nom: Mapped[str | None] = mapped_column(String(255), nullable=True)

    sujet: Mapped[str] = mapped_column(String(500), nullable=False)

    contenu_html: Mapped[str | None] = mapped_column(Text, nullable=True)

    statut: Mapped[str] = mapped_column(String(20), nullable=False)

    provider_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    entite_type: Mapped[str | None] = mapped_column(String(30), nullable=True)

    entite_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    template: Mapped[str | None] = mapped_column(String(50), nullable=True)

    erreur: Mapped[str | None] = mapped_column(Text, nullable=True)

    email_metadata: Mapped[Dict[str, Any] | None] = mapped_column(
        "metadata",
        JSONMetadata,
        nullable=True,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<EmailEnvoye(id={self.id}, statut='{self.statut}', template={self.template!r})>"
