"""
Modèle ExtranetAcces - Accès extranet d'un formateur, apprenant ou contact client.

Cycle de vie :
    invite      --(mot de passe défini)--> actif
    en_attente  --(mot de passe défini)--> actif
    actif       --(révocation)-----------> desactive

Le jeton d'invitation est à usage unique : il est effacé dès qu'il a
permis d'ouvrir une session, et refusé après invite_token_expires_at.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.enums import ExtranetStatut
from formalis.models.mixins import (
    OrganisationScopedMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    utcnow,
)


class ExtranetAcces(UUIDPrimaryKeyMixin, OrganisationScopedMixin, TimestampMixin, Base):
    """
    Accès d'une personne externe à l'extranet.

    Attributes:
        user_id: Compte chez le fournisseur d'authentification
        role: formateur | apprenant | contact_client
        entite_type / entite_id: Fiche métier de la personne
        statut: invite | en_attente | actif | desactive
        invite_token: Jeton d'invitation (NULL une fois consommé)
        invite_token_expires_at: Fin de validité du jeton
        invite_le: Date de la dernière invitation
        active_le: Date d'activation (mot de passe défini)
    """

    __tablename__ = "extranet_acces"
    __table_args__ = (
        UniqueConstraint("organisation_id", "entite_type", "entite_id", name="uq_extranet_acces_entite"),
        {"comment": "Accès extranet (formateurs, apprenants, contacts clients)"},
    )

    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)

    role: Mapped[str] = mapped_column(String(30), nullable=False)

    entite_type: Mapped[str] = mapped_column(String(30), nullable=False)

    entite_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    statut: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ExtranetStatut.INVITE.value,
        index=True,
    )

    invite_token: Mapped[str | None] = mapped_column(
        String(128),
        unique=True,
        nullable=True,
        comment="Jeton d'invitation à usage unique",
    )

    invite_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    invite_le: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    active_le: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def is_token_expired(self, now: datetime | None = None) -> bool:
        """True si le jeton a une date d'expiration dépassée."""
        if self.invite_token_expires_at is None:
            return False
        expires_at = self.invite_token_expires_at
        current = now or utcnow()
        # SQLite renvoie des datetimes naïfs (stockés en UTC)
        if expires_at.tzinfo is None:
            current = current.replace(tzinfo=None)
        return expires_at < current

    def consume_token(self) -> None:
        """Efface le jeton (usage unique)."""
        self.invite_token = None
        self.invite_token_expires_at = None

    def activate(self) -> None:
        """invite | en_attente -> actif."""
        if self.statut in (ExtranetStatut.INVITE.value, ExtranetStatut.EN_ATTENTE.value):
            self.statut = ExtranetStatut.ACTIF.value
            self.active_le = utcnow()

    def __repr__(self) -> str:
        return f"<ExtranetAcces(id={self.id}, role='{self.role}', statut='{self.statut}')>"
