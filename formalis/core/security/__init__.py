# formalis/core/security/__init__.py

# JWT
from formalis.core.security.jwt import create_access_token, verify_token

# RBAC
from formalis.core.security.permissions import (
    can_read,
    can_create,
    can_edit,
    can_delete,
    can_archive,
    can_invite_extranet,
    can_manage_settings,
    can_manage_users,
    require_permission,
)

__all__ = [
    "create_access_token", "verify_token",
    "can_read", "can_create", "can_edit", "can_delete", "can_archive",
    "can_invite_extranet", "can_manage_settings", "can_manage_users",
    "require_permission",
]
