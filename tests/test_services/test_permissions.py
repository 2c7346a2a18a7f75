"""
Tests du contrôle d'accès par rôle.
"""

import pytest

from formalis.core.errors import PermissionDeniedError
from formalis.core.security import permissions
from formalis.core.security.permissions import (
    can_archive,
    can_create,
    can_delete,
    can_edit,
    can_invite_extranet,
    can_manage_settings,
    can_read,
    can_view_finances,
    coerce_role,
    require_permission,
)
from formalis.models.enums import UserRole

ALL_CHECKS = [
    permissions.can_read,
    permissions.can_create,
    permissions.can_edit,
    permissions.can_delete,
    permissions.can_manage_sessions,
    permissions.can_manage_finances,
    permissions.can_view_finances,
    permissions.can_manage_settings,
    permissions.can_manage_users,
    permissions.can_invite_extranet,
    permissions.can_export_data,
    permissions.can_archive,
]


class TestTotality:
    """Chaque couple (rôle, capacité) a une réponse booléenne."""

    @pytest.mark.parametrize("check", ALL_CHECKS, ids=lambda c: c.__name__)
    @pytest.mark.parametrize("role", list(UserRole) + ["admin", "inconnu", "", None])
    def test_returns_bool(self, check, role):
        assert isinstance(check(role), bool)

    def test_every_capability_has_a_check(self):
        names = {check.__name__.removeprefix("can_") for check in ALL_CHECKS}
        assert names == set(permissions.CAPABILITIES)


class TestMatrix:

    def test_admin_can_everything(self):
        assert all(check(UserRole.ADMIN) for check in ALL_CHECKS)

    def test_manager(self):
        assert can_create(UserRole.MANAGER)
        assert can_edit(UserRole.MANAGER)
        assert can_invite_extranet(UserRole.MANAGER)
        assert not can_delete(UserRole.MANAGER)
        assert not can_archive(UserRole.MANAGER)
        assert not can_manage_settings(UserRole.MANAGER)

    def test_user_read_only(self):
        assert can_read(UserRole.USER)
        assert can_view_finances(UserRole.USER)
        assert not can_create(UserRole.USER)
        assert not can_edit(UserRole.USER)
        assert not can_invite_extranet(UserRole.USER)

    def test_stored_string_role(self):
        assert can_delete("admin")
        assert not can_delete("manager")


class TestCoerceRole:

    def test_unknown_role_is_least_privileged(self):
        assert coerce_role("superuser") == UserRole.USER
        assert not can_create("superuser")

    def test_none_is_least_privileged(self):
        assert coerce_role(None) == UserRole.USER


class TestRequirePermission:

    def test_allowed(self):
        require_permission(UserRole.ADMIN, can_delete, "supprimer des salles")

    def test_denied_message(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            require_permission(UserRole.USER, can_create, "créer une salle")

        assert exc_info.value.message == (
            "Permission refusée : vous n'avez pas le droit de créer une salle"
        )
