"""
Modèle Sequence - Compteurs de numéros d'affichage par organisation.

Exemple : (org, "TIC") -> 12 donne le prochain ticket TIC-0013.
"""

import uuid

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base


class Sequence(Base):
    """Compteur monotone par (organisation, préfixe d'entité)."""

    __tablename__ = "sequences"
    __table_args__ = {"comment": "Compteurs des numéros d'affichage (ENT-0001, TIC-0001)"}

    organisation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organisations.id", ondelete="CASCADE"),
        primary_key=True,
    )

    entite: Mapped[str] = mapped_column(String(10), primary_key=True)

    compteur: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Sequence(organisation_id={self.organisation_id}, entite='{self.entite}', compteur={self.compteur})>"
