"""
Modèle Utilisateur - Membre du back-office d'une organisation.

L'identifiant est celui attribué par le fournisseur d'authentification
(claim `sub` du JWT), ce qui permet la résolution directe du tenant.
"""

import uuid

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.enums import UserRole
from formalis.models.mixins import OrganisationScopedMixin, TimestampMixin


class Utilisateur(OrganisationScopedMixin, TimestampMixin, Base):
    """
    Utilisateur du back-office.

    Attributes:
        id: Identifiant du compte chez le fournisseur d'authentification
        organisation_id: Organisation de rattachement
        email: Adresse email de connexion
        prenom / nom: Identité affichée (historique, tickets)
        role: admin | manager | user
        actif: Compte actif (un compte inactif n'est pas authentifié)
    """

    __tablename__ = "utilisateurs"
    __table_args__ = {"comment": "Utilisateurs du back-office"}

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    prenom: Mapped[str | None] = mapped_column(String(100), nullable=True)

    nom: Mapped[str | None] = mapped_column(String(100), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        comment="admin | manager | user",
    )

    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def nom_complet(self) -> str:
        """Prénom + nom, ou 'Utilisateur' si l'identité est vide."""
        full = f"{self.prenom or ''} {self.nom or ''}".strip()
        return full or "Utilisateur"

    def __repr__(self) -> str:
        return f"<Utilisateur(id={self.id}, email='{self.email}', role='{self.role}')>"
