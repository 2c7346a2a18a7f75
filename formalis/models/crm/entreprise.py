"""
Modèle Entreprise - Entreprise cliente d'un organisme de formation.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.mixins import OrganisationScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Entreprise(UUIDPrimaryKeyMixin, OrganisationScopedMixin, TimestampMixin, Base):
    """
    Entreprise cliente.

    Attributes:
        numero_affichage: Numéro lisible (ENT-0001), unique par organisation
        nom: Raison sociale (requis)
        siret / email / telephone: Coordonnées
        adresse / code_postal / ville: Adresse postale
        archived_at: Date d'archivage (NULL = active)
    """

    __tablename__ = "entreprises"
    __table_args__ = (
        UniqueConstraint("organisation_id", "numero_affichage", name="uq_entreprise_numero"),
        {"comment": "Entreprises clientes"},
    )

    numero_affichage: Mapped[str] = mapped_column(String(20), nullable=False)

    nom: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    siret: Mapped[str | None] = mapped_column(String(20), nullable=True)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    telephone: Mapped[str | None] = mapped_column(String(30), nullable=True)

    adresse: Mapped[str | None] = mapped_column(String(500), nullable=True)

    code_postal: Mapped[str | None] = mapped_column(String(10), nullable=True)

    ville: Mapped[str | None] = mapped_column(String(100), nullable=True)

    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def label(self) -> str:
        """Libellé affiché dans l'historique."""
        return f"{self.numero_affichage} - {self.nom}"

    def __repr__(self) -> str:
        return f"<Entreprise(id={self.id}, numero='{self.numero_affichage}', nom='{self.nom}')>"
