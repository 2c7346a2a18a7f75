"""
Modèle Salle - Salle de formation d'une organisation.

Suppression logique : actif = False (les sessions passées gardent
leur référence).
"""

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.mixins import OrganisationScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Salle(UUIDPrimaryKeyMixin, OrganisationScopedMixin, TimestampMixin, Base):
    """
    Salle de formation.

    Attributes:
        nom: Nom de la salle (requis)
        adresse: Adresse postale
        capacite: Nombre de places (entier positif ou nul)
        equipements: Description libre des équipements
        actif: False une fois supprimée
    """

    __tablename__ = "salles"
    __table_args__ = {"comment": "Salles de formation"}

    nom: Mapped[str] = mapped_column(String(255), nullable=False)

    adresse: Mapped[str | None] = mapped_column(String(500), nullable=True)

    capacite: Mapped[int | None] = mapped_column(Integer, nullable=True)

    equipements: Mapped[str | None] = mapped_column(Text, nullable=True)

    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    def __repr__(self) -> str:
        return f"<Salle(id={self.id}, nom='{self.nom}', actif={self.actif})>"
