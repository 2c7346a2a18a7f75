"""
Modèle Activite - Note libre rattachée (ou non) à une fiche métier.
"""

import uuid

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formalis.database.base_class import Base
from formalis.models.mixins import OrganisationScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from formalis.models.organisation.utilisateur import Utilisateur


class Activite(UUIDPrimaryKeyMixin, OrganisationScopedMixin, TimestampMixin, Base):
    """
    Activité saisie par un utilisateur (appel, rendez-vous, note).

    entite_type / entite_id sont optionnels : NULL quand l'activité
    n'est rattachée à aucune fiche.
    """

    __tablename__ = "activites"
    __table_args__ = {"comment": "Activités et notes du back-office"}

    auteur_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("utilisateurs.id", ondelete="SET NULL"),
        nullable=True,
    )

    contenu: Mapped[str] = mapped_column(Text, nullable=False)

    entite_type: Mapped[str | None] = mapped_column(String(30), nullable=True)

    entite_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    auteur: Mapped[Utilisateur | None] = relationship(Utilisateur, lazy="joined")

    def __repr__(self) -> str:
        return f"<Activite(id={self.id}, entite_type={self.entite_type!r})>"
