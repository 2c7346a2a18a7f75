"""
Requêtes paginées et filtrées, toujours limitées à une organisation.

Ordre d'application :
    1. filtre d'égalité sur organisation_id (toujours en premier)
    2. clauses propres au module (ex: actif = True)
    3. filtres optionnels de l'appelant, combinés en ET
    4. tri (par défaut created_at DESC, puis id pour la stabilité)
    5. pagination : OFFSET (page - 1) * 25, LIMIT 25

Un filtre dont la valeur vaut None ou "" est ignoré.

Usage:
    query = (
        TenantQuery(Salle, organisation_id)
        .where(Salle.actif.is_(True))
        .search([Salle.nom, Salle.adresse], search)
        .order_by(Salle.nom.asc())
    )
    rows, total = query.fetch(db, PageRequest(page=2))
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Type
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from formalis.core.config import settings

PAGE_SIZE = settings.PAGE_SIZE

# Borne haute d'une journée à la milliseconde : 23:59:59.999
END_OF_DAY = time(23, 59, 59, 999000)


# =============================================================================
# PAGINATION
# =============================================================================

@dataclass(frozen=True)
class PageRequest:
    """Page demandée (1-based) ; la taille est fixe."""
    page: int = 1
    page_size: int = PAGE_SIZE

    def __post_init__(self):
        if self.page < 1:
            object.__setattr__(self, "page", 1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def range(self) -> Tuple[int, int]:
        """Intervalle inclusif [offset, offset + page_size - 1]."""
        return self.offset, self.offset + self.page_size - 1


# =============================================================================
# FILTRES
# =============================================================================

class FilterOp(str, Enum):
    EQ = "eq"
    ILIKE = "ilike"          # sous-chaîne insensible à la casse
    DATE_GTE = "date_gte"    # >= début de journée
    DATE_LTE = "date_lte"    # <= fin de journée (.999)
    IS_NULL = "is_null"      # value=True -> IS NULL, False -> IS NOT NULL
    IN = "in_"


@dataclass(frozen=True)
class FilterSpec:
    """Filtre optionnel {champ, opérateur, valeur}."""
    field: str
    op: FilterOp
    value: Any

    @property
    def is_active(self) -> bool:
        if self.value is None or self.value == "":
            return False
        if self.op == FilterOp.IN:
            return len(self.value) > 0
        return True


def parse_day(value: Any) -> date:
    """Accepte une date, un datetime ou une chaîne YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def day_start(value: Any) -> datetime:
    """YYYY-MM-DD -> YYYY-MM-DDT00:00:00 (UTC)."""
    return datetime.combine(parse_day(value), time.min, tzinfo=timezone.utc)


def day_end(value: Any) -> datetime:
    """YYYY-MM-DD -> YYYY-MM-DDT23:59:59.999 (UTC)."""
    return datetime.combine(parse_day(value), END_OF_DAY, tzinfo=timezone.utc)


def paired_filters(first: FilterSpec, second: FilterSpec) -> List[FilterSpec]:
    """
    Filtres co-dépendants (ex: entite_type + entite_id).

    Appliqués seulement si les deux valeurs sont présentes ; sinon aucun
    des deux ne l'est.
    """
    if first.is_active and second.is_active:
        return [first, second]
    return []


def build_clause(model: Type[Any], spec: FilterSpec):
    """Convertit un FilterSpec en clause SQLAlchemy."""
    column = getattr(model, spec.field)

    if spec.op == FilterOp.EQ:
        value = spec.value.value if isinstance(spec.value, Enum) else spec.value
        return column == value
    if spec.op == FilterOp.ILIKE:
        return column.ilike(f"%{spec.value}%")
    if spec.op == FilterOp.DATE_GTE:
        return column >= day_start(spec.value)
    if spec.op == FilterOp.DATE_LTE:
        return column <= day_end(spec.value)
    if spec.op == FilterOp.IS_NULL:
        return column.is_(None) if spec.value else column.is_not(None)
    if spec.op == FilterOp.IN:
        return column.in_(list(spec.value))

    raise ValueError(f"Opérateur de filtre inconnu: {spec.op}")


# =============================================================================
# REQUÊTE TENANT
# =============================================================================

class TenantQuery:
    """
    Requête SELECT sur un modèle, filtrée par organisation.

    Le filtre d'organisation est posé à la construction et ne peut pas
    être retiré.
    """

    def __init__(self, model: Type[Any], organisation_id: UUID):
        self.model = model
        self.organisation_id = organisation_id
        self._query: Select = select(model).where(model.organisation_id == organisation_id)
        self._order_by: Optional[Sequence[Any]] = None

    def where(self, *clauses) -> "TenantQuery":
        self._query = self._query.where(*clauses)
        return self

    def filter(self, *specs: FilterSpec) -> "TenantQuery":
        """Ajoute les filtres actifs (les autres sont ignorés)."""
        for spec in specs:
            if spec.is_active:
                self._query = self._query.where(build_clause(self.model, spec))
        return self

    def filters(self, specs: Iterable[FilterSpec]) -> "TenantQuery":
        return self.filter(*specs)

    def search(self, columns: Sequence[Any], term: Optional[str]) -> "TenantQuery":
        """Recherche libre : sous-chaîne sur l'une des colonnes (OU)."""
        if term:
            pattern = f"%{term}%"
            self._query = self._query.where(or_(*[col.ilike(pattern) for col in columns]))
        return self

    def order_by(self, *clauses) -> "TenantQuery":
        self._order_by = clauses
        return self

    def _ordering(self) -> Sequence[Any]:
        if self._order_by:
            return (*self._order_by, self.model.id.asc())
        return (self.model.created_at.desc(), self.model.id.desc())

    @property
    def statement(self) -> Select:
        return self._query.order_by(*self._ordering())

    def count(self, db: Session) -> int:
        count_query = select(func.count()).select_from(self._query.subquery())
        return db.execute(count_query).scalar() or 0

    def all(self, db: Session) -> List[Any]:
        """Toutes les lignes (sans pagination)."""
        return list(db.execute(self.statement).unique().scalars().all())

    def fetch(self, db: Session, page: PageRequest) -> Tuple[List[Any], int]:
        """
        Exécute la requête paginée.

        Returns:
            (lignes de la page, total avant pagination)

        Raises:
            SQLAlchemyError: Erreur de stockage (gérée par l'appelant)
        """
        total = self.count(db)
        rows = db.execute(
            self.statement.offset(page.offset).limit(page.limit)
        ).unique().scalars().all()
        return list(rows), total
