"""
Numéros d'affichage par organisation (ENT-0001, TIC-0001...).
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from formalis.models.organisation.sequence import Sequence


def next_numero(db: Session, organisation_id: UUID, prefix: str) -> str:
    """
    Incrémente le compteur (organisation, prefix) et retourne le numéro formaté.

    Le compteur est verrouillé (SELECT ... FOR UPDATE sur PostgreSQL)
    jusqu'au commit de l'appelant.
    """
    sequence = db.execute(
        select(Sequence)
        .where(Sequence.organisation_id == organisation_id, Sequence.entite == prefix)
        .with_for_update()
    ).scalar_one_or_none()

    if sequence is None:
        sequence = Sequence(organisation_id=organisation_id, entite=prefix, compteur=0)
        db.add(sequence)

    sequence.compteur += 1
    db.flush()
    return f"{prefix}-{sequence.compteur:04d}"
