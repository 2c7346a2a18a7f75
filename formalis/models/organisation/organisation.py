"""
Modèle Organisation - Organisme de formation (tenant).

Chaque enregistrement métier porte une référence vers une organisation ;
aucune requête ne doit franchir cette frontière.
"""

from typing import Any, Dict, Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from formalis.database.base_class import Base
from formalis.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin
from formalis.models.types import JSONTheme


class Organisation(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Organisme de formation client de Formalis.

    Attributes:
        nom: Raison sociale affichée
        slug: Identifiant court unique (sous-domaine, URLs)
        theme: Personnalisation visuelle (couleurs, logo)
        actif: Organisation active
    """

    __tablename__ = "organisations"
    __table_args__ = {"comment": "Organismes de formation (tenants)"}

    nom: Mapped[str] = mapped_column(String(255), nullable=False)

    slug: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        comment="Identifiant court unique de l'organisation",
    )

    theme: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONTheme, nullable=True)

    actif: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Organisation(id={self.id}, slug='{self.slug}')>"
