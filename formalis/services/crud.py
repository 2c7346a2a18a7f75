"""
Exécution des mutations limitées à une organisation.

Chaque UPDATE / DELETE porte `organisation_id = <tenant résolu>` en plus
de l'identifiant ciblé : un identifiant valide d'une autre organisation
est traité comme inexistant (NotFoundError), jamais modifié.

Les violations d'unicité deviennent DuplicateError avec un message métier ;
les autres erreurs de stockage remontent à la frontière de l'action.
"""

import logging
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import delete, inspect, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from formalis.core.errors import DuplicateError, NotFoundError
from formalis.database.base_class import Base
from formalis.models.mixins import utcnow

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Base)

# SQLSTATE PostgreSQL "unique_violation"
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True si l'IntegrityError provient d'une contrainte d'unicité (PostgreSQL ou SQLite)."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


def row_to_dict(row: Any) -> Dict[str, Any]:
    """Valeurs des colonnes d'une ligne ORM (clés = attributs Python)."""
    mapper = inspect(row).mapper
    return {attr.key: getattr(row, attr.key) for attr in mapper.column_attrs}


class TenantScopedRepository(Generic[M]):
    """
    CRUD générique sur un modèle portant organisation_id.

    Args:
        model: Classe du modèle
        db: Session SQLAlchemy
        organisation_id: Organisation résolue
        duplicate_message: Message en cas de doublon (ex: "Cette fonction existe déjà")
        duplicate_field: Champ auquel rattacher le doublon ("_form" par défaut)
        not_found_message: Message si la ligne est absente ou d'une autre organisation

    Example:
        repo = TenantScopedRepository(Salle, db, ctx.organisation_id,
                                      not_found_message="Salle non trouvée")
        salle = repo.create({"nom": "Salle A"})
    """

    def __init__(
            self,
            model: Type[M],
            db: Session,
            organisation_id: UUID,
            duplicate_message: str = "Cet enregistrement existe déjà",
            duplicate_field: str = "_form",
            not_found_message: Optional[str] = None,
    ):
        self.model = model
        self.db = db
        self.organisation_id = organisation_id
        self.duplicate_message = duplicate_message
        self.duplicate_field = duplicate_field
        self.not_found_message = not_found_message or f"{model.__name__} non trouvé"

    def _base_query(self):
        """Retourne une requête de base filtrée par organisation_id."""
        return select(self.model).where(self.model.organisation_id == self.organisation_id)

    def _commit(self) -> None:
        """Commit, avec conversion des violations d'unicité."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                raise DuplicateError(self.duplicate_message, field=self.duplicate_field)
            raise

    # =========================================================================
    # LECTURE
    # =========================================================================

    def get(self, record_id: UUID) -> M:
        """
        Récupère une ligne de l'organisation.

        Raises:
            NotFoundError: Ligne absente ou appartenant à une autre organisation
        """
        row = self.db.execute(
            self._base_query().where(self.model.id == record_id)
        ).unique().scalar_one_or_none()
        if row is None:
            raise NotFoundError(self.not_found_message)
        return row

    def exists(self, record_id: UUID) -> bool:
        try:
            self.get(record_id)
        except NotFoundError:
            return False
        return True

    # =========================================================================
    # ÉCRITURE
    # =========================================================================

    def create(self, values: Dict[str, Any]) -> M:
        """Insère une ligne rattachée à l'organisation."""
        row = self.model(organisation_id=self.organisation_id, **values)
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        return row

    def update(self, record_id: UUID, values: Dict[str, Any]) -> M:
        """
        Met à jour une ligne de l'organisation.

        Raises:
            NotFoundError: Aucune ligne de l'organisation avec cet id
            DuplicateError: Violation d'unicité
        """
        if values:
            try:
                result = self.db.execute(
                    update(self.model)
                    .where(
                        self.model.id == record_id,
                        self.model.organisation_id == self.organisation_id,
                    )
                    .values(**values)
                    .execution_options(synchronize_session="fetch")
                )
            except IntegrityError as e:
                self.db.rollback()
                if is_unique_violation(e):
                    raise DuplicateError(self.duplicate_message, field=self.duplicate_field)
                raise
            if result.rowcount == 0:
                self.db.rollback()
                raise NotFoundError(self.not_found_message)
            self._commit()

        row = self.get(record_id)
        self.db.refresh(row)
        return row

    def set_flag(self, record_ids: Iterable[UUID], values: Dict[str, Any]) -> int:
        """
        Applique les mêmes valeurs à plusieurs lignes de l'organisation.

        Returns:
            Nombre de lignes modifiées

        Raises:
            NotFoundError: Aucune des lignes n'appartient à l'organisation
        """
        ids: List[UUID] = list(dict.fromkeys(record_ids))
        if not ids:
            return 0

        result = self.db.execute(
            update(self.model)
            .where(
                self.model.id.in_(ids),
                self.model.organisation_id == self.organisation_id,
            )
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFoundError(self.not_found_message)

        self._commit()
        if result.rowcount < len(ids):
            logger.warning(
                f"[crud] {self.model.__name__}: {len(ids) - result.rowcount} id(s) hors organisation ignoré(s)"
            )
        return result.rowcount

    def soft_delete(self, record_ids: Iterable[UUID], flag: str = "actif") -> int:
        """Suppression logique : flag = False."""
        return self.set_flag(record_ids, {flag: False})

    def archive(self, record_ids: Iterable[UUID], column: str = "archived_at") -> int:
        """Archivage : column = maintenant."""
        return self.set_flag(record_ids, {column: utcnow()})

    def hard_delete(self, record_id: UUID) -> None:
        """
        Suppression physique (entités sans références historiques uniquement).

        Raises:
            NotFoundError: Aucune ligne de l'organisation avec cet id
        """
        result = self.db.execute(
            delete(self.model).where(
                self.model.id == record_id,
                self.model.organisation_id == self.organisation_id,
            )
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFoundError(self.not_found_message)
        self._commit()
