"""
Mixins réutilisables pour les modèles SQLAlchemy.

Ce module définit les colonnes communes à plusieurs modèles
(clé primaire UUID, rattachement à l'organisation, timestamps).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """Horodatage courant en UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


class UUIDPrimaryKeyMixin:
    """
    Mixin ajoutant une clé primaire UUID générée côté Python.

    Usage:
        class Salle(UUIDPrimaryKeyMixin, Base):
            __tablename__ = "salles"
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="Identifiant unique",
    )


class OrganisationScopedMixin:
    """
    Mixin ajoutant la colonne organisation_id (frontière multi-tenant).

    Toute requête sur un modèle portant ce mixin doit filtrer sur
    organisation_id.
    """

    organisation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organisations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Organisation propriétaire de cet enregistrement",
    )


class TimestampMixin:
    """
    Mixin ajoutant les colonnes created_at et updated_at.

    - created_at : auto-rempli à la création
    - updated_at : auto-mis à jour à chaque modification
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
        doc="Date et heure de création",
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=None,
        onupdate=utcnow,
        doc="Date et heure de dernière modification",
    )
