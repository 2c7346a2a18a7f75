"""
RBAC - Contrôle d'accès par rôle pour les utilisateurs du back-office.

Rôles : admin, manager, user

| Fonctionnalité           | Admin | Manager | User          |
|--------------------------|-------|---------|---------------|
| CRM (lecture)            | Oui   | Oui     | Oui           |
| CRM (création/modif)     | Oui   | Oui     | Non           |
| Sessions                 | Oui   | Oui     | Non           |
| Devis / Factures         | Oui   | Oui     | Lecture seule |
| Paramètres OF            | Oui   | Non     | Non           |
| Gérer utilisateurs       | Oui   | Non     | Non           |
| Inviter extranet         | Oui   | Oui     | Non           |
| Export comptable / BPF   | Oui   | Non     | Non           |
| Supprimer des données    | Oui   | Non     | Non           |

La table est statique et totale : chaque couple (rôle, capacité) a une
réponse booléenne. Une valeur de rôle inconnue est ramenée au rôle le
moins privilégié.
"""

import logging
from typing import Callable, Dict, FrozenSet, Union

from formalis.core.errors import PermissionDeniedError
from formalis.models.enums import UserRole

logger = logging.getLogger(__name__)

RoleLike = Union[UserRole, str, None]


def coerce_role(role: RoleLike) -> UserRole:
    """Convertit une valeur stockée en UserRole (repli sur USER si inconnue)."""
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        logger.warning(f"[permissions] Rôle inconnu {role!r}, traité comme 'user'")
        return UserRole.USER


_ALL = frozenset(UserRole)
_ADMIN = frozenset({UserRole.ADMIN})
_ADMIN_MANAGER = frozenset({UserRole.ADMIN, UserRole.MANAGER})

# Capacité -> rôles autorisés
CAPABILITIES: Dict[str, FrozenSet[UserRole]] = {
    "read": _ALL,
    "create": _ADMIN_MANAGER,
    "edit": _ADMIN_MANAGER,
    "delete": _ADMIN,
    "manage_sessions": _ADMIN_MANAGER,
    "manage_finances": _ADMIN_MANAGER,
    "view_finances": _ALL,
    "manage_settings": _ADMIN,
    "manage_users": _ADMIN,
    "invite_extranet": _ADMIN_MANAGER,
    "export_data": _ADMIN,
    "archive": _ADMIN,
}


def _allowed(capability: str, role: RoleLike) -> bool:
    return coerce_role(role) in CAPABILITIES[capability]


def can_read(role: RoleLike) -> bool:
    return _allowed("read", role)


def can_create(role: RoleLike) -> bool:
    return _allowed("create", role)


def can_edit(role: RoleLike) -> bool:
    return _allowed("edit", role)


def can_delete(role: RoleLike) -> bool:
    return _allowed("delete", role)


def can_manage_sessions(role: RoleLike) -> bool:
    return _allowed("manage_sessions", role)


def can_manage_finances(role: RoleLike) -> bool:
    return _allowed("manage_finances", role)


def can_view_finances(role: RoleLike) -> bool:
    # Lecture seule pour 'user'
    return _allowed("view_finances", role)


def can_manage_settings(role: RoleLike) -> bool:
    return _allowed("manage_settings", role)


def can_manage_users(role: RoleLike) -> bool:
    return _allowed("manage_users", role)


def can_invite_extranet(role: RoleLike) -> bool:
    return _allowed("invite_extranet", role)


def can_export_data(role: RoleLike) -> bool:
    return _allowed("export_data", role)


def can_archive(role: RoleLike) -> bool:
    return _allowed("archive", role)


def require_permission(role: RoleLike, check: Callable[[RoleLike], bool], action: str) -> None:
    """
    Vérifie une capacité avant une mutation.

    Usage:
        require_permission(ctx.role, can_create, "créer une salle")

    Raises:
        PermissionDeniedError: Si le rôle n'a pas la capacité
    """
    if not check(role):
        raise PermissionDeniedError(action)
