"""
Modèle Ticket - Demandes de support internes ou issues de l'extranet.

Transitions de statut :
- vers `resolu` : resolved_at renseigné
- vers `ferme`  : closed_at renseigné
- retour à `ouvert` depuis `resolu`/`ferme` : les deux dates sont remises à NULL
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formalis.database.base_class import Base
from formalis.models.crm.entreprise import Entreprise
from formalis.models.enums import TicketPriorite, TicketStatut
from formalis.models.mixins import OrganisationScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin
from formalis.models.organisation.utilisateur import Utilisateur


class Ticket(UUIDPrimaryKeyMixin, OrganisationScopedMixin, TimestampMixin, Base):
    """
    Ticket de support.

    Attributes:
        numero_affichage: TIC-0001, unique par organisation
        titre / description: Contenu de la demande
        statut: ouvert | en_cours | en_attente | resolu | ferme
        priorite: basse | normale | haute | urgente
        categorie: bug | demande | question | amelioration | autre
        auteur_user_id / auteur_nom / auteur_email / auteur_type: Auteur
        entreprise_id: Entreprise concernée
        assignee_id: Utilisateur en charge
    """

    __tablename__ = "tickets"
    __table_args__ = (
        UniqueConstraint("organisation_id", "numero_affichage", name="uq_ticket_numero"),
        {"comment": "Tickets de support"},
    )

    numero_affichage: Mapped[str] = mapped_column(String(20), nullable=False)

    titre: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    statut: Mapped[str] = mapped_column(String(20), nullable=False, default=TicketStatut.OUVERT.value, index=True)

    priorite: Mapped[str] = mapped_column(String(20), nullable=False, default=TicketPriorite.NORMALE.value)

    categorie: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # --- Auteur ---

    auteur_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    auteur_nom: Mapped[str | None] = mapped_column(String(255), nullable=True)

    auteur_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    auteur_type: Mapped[str] = mapped_column(String(30), nullable=False)

    # --- Rattachements ---

    entreprise_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("entreprises.id", ondelete="SET NULL"),
        nullable=True,
    )

    assignee_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("utilisateurs.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # --- Cycle de vie ---

    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # === Relations ===

    entreprise: Mapped[Entreprise | None] = relationship(Entreprise, lazy="joined")

    assignee: Mapped[Utilisateur | None] = relationship(Utilisateur, lazy="joined")

    @property
    def label(self) -> str:
        return f"{self.numero_affichage} - {self.titre}"

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, numero='{self.numero_affichage}', statut='{self.statut}')>"
