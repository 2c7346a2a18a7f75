"""
Frontière des actions de données.

Une action est une fonction de service (synchrone ou async) dont le
premier argument est le TenantContext. Décorée par list_action /
mutation_action / delete_action, elle s'appelle avec la TenantResolution
brute et ne lève plus : les exceptions métier et de stockage deviennent
des résultats explicites.

Usage:
    @mutation_action("salles")
    def create_salle(ctx: TenantContext, payload: dict):
        data = ensure_valid(SalleInput, payload)
        require_permission(ctx.role, can_create, "créer une salle")
        ...
        return salle

    result = create_salle(resolution, payload)   # MutationResult
"""

import functools
import inspect
import logging
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from formalis.core.auth.tenant_resolver import AuthFailure, TenantContext, TenantResolution
from formalis.core.errors import (
    AuthenticationError,
    DuplicateError,
    ExternalServiceError,
    InputValidationError,
    NotFoundError,
    PermissionDeniedError,
)
from formalis.core.results import DeleteResult, ErrorKind, ListResult, MutationResult
from formalis.services.validation import validate_input

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Exceptions converties en résultat ; toute autre exception remonte
HANDLED_ERRORS = (
    AuthenticationError,
    PermissionDeniedError,
    NotFoundError,
    InputValidationError,
    DuplicateError,
    ExternalServiceError,
    SQLAlchemyError,
)


def require_tenant(resolution: TenantResolution) -> TenantContext:
    """
    Raises:
        AuthenticationError: Pas de tenant résolu
    """
    if isinstance(resolution, AuthFailure):
        raise AuthenticationError(resolution.error)
    return resolution


def ensure_valid(schema: Type[M], payload: Any) -> M:
    """
    Valide une entrée avant tout accès au stockage.

    Raises:
        InputValidationError: {champ: [messages]}
    """
    model, errors = validate_input(schema, payload)
    if errors:
        raise InputValidationError(errors)
    return model


def storage_message(exc: SQLAlchemyError) -> str:
    """Message brut du pilote, sans la requête SQL."""
    return str(getattr(exc, "orig", None) or exc)


def classify(exc: Exception) -> Tuple[ErrorKind, str]:
    """Catégorie et message utilisateur d'une exception gérée."""
    if isinstance(exc, AuthenticationError):
        return ErrorKind.AUTHENTICATION, exc.message
    if isinstance(exc, PermissionDeniedError):
        return ErrorKind.AUTHORIZATION, exc.message
    if isinstance(exc, NotFoundError):
        return ErrorKind.NOT_FOUND, str(exc)
    if isinstance(exc, InputValidationError):
        messages = [message for field_messages in exc.errors.values() for message in field_messages]
        return ErrorKind.VALIDATION, " ; ".join(messages)
    if isinstance(exc, DuplicateError):
        return ErrorKind.CONFLICT, exc.message
    if isinstance(exc, ExternalServiceError):
        return ErrorKind.UPSTREAM, exc.message
    return ErrorKind.STORAGE, storage_message(exc)


# =============================================================================
# CONVERSION EN RÉSULTATS
# =============================================================================

def _list_success(value: Tuple[list, int]) -> ListResult:
    data, count = value
    return ListResult(data=data, count=count)


def _list_failure(exc: Exception) -> ListResult:
    kind, message = classify(exc)
    return ListResult.failure(message, kind)


def _mutation_failure(exc: Exception) -> MutationResult:
    if isinstance(exc, InputValidationError):
        return MutationResult.field_errors(exc.errors)
    if isinstance(exc, DuplicateError):
        return MutationResult(error={exc.field: [exc.message]}, kind=ErrorKind.CONFLICT)
    kind, message = classify(exc)
    return MutationResult.form_error(message, kind)


def _delete_failure(exc: Exception) -> DeleteResult:
    kind, message = classify(exc)
    return DeleteResult.failure(message, kind)


def _handle_failure(component: str, ctx: Optional[TenantContext], exc: Exception, failure: Callable):
    if isinstance(exc, SQLAlchemyError):
        logger.error(f"[{component}] Erreur de stockage: {exc}")
        if ctx is not None:
            ctx.db.rollback()
            ctx.admin_db.rollback()
    return failure(exc)


def _make_action(component: str, success: Callable, failure: Callable) -> Callable:
    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(resolution: TenantResolution, *args, **kwargs):
                ctx = None
                try:
                    ctx = require_tenant(resolution)
                    value = await func(ctx, *args, **kwargs)
                except HANDLED_ERRORS as e:
                    return _handle_failure(component, ctx, e, failure)
                return success(value)

            return async_wrapper

        @functools.wraps(func)
        def wrapper(resolution: TenantResolution, *args, **kwargs):
            ctx = None
            try:
                ctx = require_tenant(resolution)
                value = func(ctx, *args, **kwargs)
            except HANDLED_ERRORS as e:
                return _handle_failure(component, ctx, e, failure)
            return success(value)

        return wrapper

    return decorator


# =============================================================================
# DÉCORATEURS
# =============================================================================

def list_action(component: str) -> Callable:
    """Lecture paginée : la fonction retourne (lignes, total) -> ListResult."""
    return _make_action(component, _list_success, _list_failure)


def mutation_action(component: str) -> Callable:
    """Création / modification : la fonction retourne la ligne publique -> MutationResult."""
    return _make_action(component, MutationResult.success, _mutation_failure)


def delete_action(component: str) -> Callable:
    """Suppression (logique ou physique) : la fonction ne retourne rien -> DeleteResult."""
    return _make_action(component, lambda _: DeleteResult(success=True), _delete_failure)


def detail_action(component: str) -> Callable:
    """Lecture d'une fiche : même forme qu'une mutation ({data} ou {error: {_form: [...]}})."""
    return _make_action(component, MutationResult.success, _mutation_failure)
