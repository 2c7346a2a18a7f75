"""
Modèle FonctionPredefinie - Liste des fonctions proposées pour les contacts.
"""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.mixins import OrganisationScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


# Fonctions créées à la première lecture pour une organisation
DEFAULT_FONCTIONS = [
    "Directeur Général",
    "Directeur d'agence",
    "Responsable formation",
    "Responsable",
    "Manager",
    "Chef d'équipe",
    "Responsable QSE",
    "HSE",
    "Comptabilité",
    "Assistant(e) de direction",
    "DRH",
    "Responsable RH",
    "Chef de projet",
    "Technicien",
    "Opérateur",
]


class FonctionPredefinie(UUIDPrimaryKeyMixin, OrganisationScopedMixin, TimestampMixin, Base):
    """Fonction (intitulé de poste), unique par organisation, triée par ordre puis nom."""

    __tablename__ = "fonctions_predefinies"
    __table_args__ = (
        UniqueConstraint("organisation_id", "nom", name="uq_fonction_organisation_nom"),
        {"comment": "Fonctions prédéfinies des contacts"},
    )

    nom: Mapped[str] = mapped_column(String(100), nullable=False)

    ordre: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<FonctionPredefinie(id={self.id}, nom='{self.nom}', ordre={self.ordre})>"
