from formalis.core.auth.user_auth import Identity, bearer_scheme, get_current_identity
from formalis.core.auth.tenant_resolver import (
    AuthFailure,
    TenantContext,
    TenantResolution,
    get_tenant_resolution,
    resolve_tenant,
)
from formalis.core.auth.provider import AuthProvider, AuthProviderError, get_auth_provider

__all__ = [
    "Identity",
    "bearer_scheme",
    "get_current_identity",
    "AuthFailure",
    "TenantContext",
    "TenantResolution",
    "get_tenant_resolution",
    "resolve_tenant",
    "AuthProvider",
    "AuthProviderError",
    "get_auth_provider",
]
