"""
Résultats explicites des actions (succès avec données / échec typé).

Les actions de la couche d'accès aux données ne lèvent pas d'exception
vers leur appelant : elles retournent l'un de ces objets, que les routes
convertissent en réponse HTTP via `formalis.api.v1.responses`.

Formes JSON :
    ListResult     -> {"data": [...], "count": 12, "error": null}
    MutationResult -> {"data": {...}} ou {"error": {"champ": ["message"], "_form": [...]}}
    DeleteResult   -> {"success": true} ou {"error": "message"}
"""

from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

FORM_ERROR_KEY = "_form"

FieldErrors = Dict[str, List[str]]


class ErrorKind(str, Enum):
    """Catégorie d'échec, utilisée pour choisir le statut HTTP."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"
    UPSTREAM = "upstream"


class ListResult(BaseModel, Generic[T]):
    """Résultat paginé d'une lecture."""
    data: List[T] = Field(default_factory=list)
    count: int = 0
    error: Optional[str] = None
    kind: Optional[ErrorKind] = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str, kind: ErrorKind = ErrorKind.STORAGE) -> "ListResult[T]":
        """Lecture en échec : jamais d'exception, toujours une liste vide."""
        return cls(data=[], count=0, error=message, kind=kind)


class MutationResult(BaseModel, Generic[T]):
    """Résultat d'une création ou d'une mise à jour."""
    data: Optional[T] = None
    error: Optional[FieldErrors] = None
    kind: Optional[ErrorKind] = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any) -> "MutationResult[T]":
        return cls(data=data)

    @classmethod
    def field_errors(cls, errors: FieldErrors) -> "MutationResult[T]":
        return cls(error=errors, kind=ErrorKind.VALIDATION)

    @classmethod
    def form_error(cls, message: str, kind: ErrorKind = ErrorKind.STORAGE) -> "MutationResult[T]":
        """Erreur non attribuable à un champ (droits, stockage...)."""
        return cls(error={FORM_ERROR_KEY: [message]}, kind=kind)


class DeleteResult(BaseModel):
    """Résultat d'une suppression (logique ou physique)."""
    success: bool = False
    error: Optional[str] = None
    kind: Optional[ErrorKind] = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str, kind: ErrorKind = ErrorKind.STORAGE) -> "DeleteResult":
        return cls(success=False, error=message, kind=kind)
