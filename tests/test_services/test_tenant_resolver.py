"""
Tests de la résolution du tenant et du cache d'appartenance.
"""

import inspect
import uuid
from unittest.mock import MagicMock

import pytest

from formalis.core import cache
from formalis.core.auth import tenant_resolver
from formalis.core.auth.tenant_resolver import (
    AuthFailure,
    TenantContext,
    get_tenant_resolution,
    invalidate_all_memberships,
    invalidate_membership,
    resolve_tenant,
)
from formalis.models.enums import UserRole


@pytest.fixture
def rls_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(
        tenant_resolver,
        "configure_tenant_context",
        lambda db, organisation_id: calls.append(organisation_id),
    )
    return calls


@pytest.fixture
def redis_store(monkeypatch):
    """Client Redis simulé adossé à un dict."""
    store = {}
    client = MagicMock()
    client.get.side_effect = store.get
    client.set.side_effect = lambda key, value, ex=None: store.__setitem__(key, value)
    client.delete.side_effect = lambda *keys: [store.pop(key, None) for key in keys]
    client.scan_iter.side_effect = lambda match, count: [k for k in list(store) if k.endswith(":org")]
    monkeypatch.setattr(cache, "get_redis", lambda: client)
    return store


class TestResolveTenant:

    def test_member(self, db_session, organisation, user_admin, rls_calls):
        resolution = resolve_tenant(user_admin.id, db_session, db_session)

        assert isinstance(resolution, TenantContext)
        assert resolution.organisation_id == organisation.id
        assert resolution.role == UserRole.ADMIN
        assert resolution.user_nom == "Alice Martin"
        assert rls_calls == [organisation.id]

    def test_no_session(self, db_session, rls_calls):
        assert resolve_tenant(None, db_session, db_session) == AuthFailure()
        assert rls_calls == []

    def test_unknown_user(self, db_session, rls_calls):
        assert resolve_tenant(uuid.uuid4(), db_session, db_session) == AuthFailure()
        assert rls_calls == []

    def test_inactive_user(self, db_session, user_admin, rls_calls):
        user_admin.actif = False
        db_session.commit()

        assert resolve_tenant(user_admin.id, db_session, db_session) == AuthFailure()
        assert rls_calls == []

    def test_dependency_is_synchronous(self):
        # FastAPI exécute les dépendances synchrones dans son threadpool
        assert not inspect.iscoroutinefunction(get_tenant_resolution)


class TestMembershipCache:

    def test_cached_until_invalidated(self, db_session, user_admin, redis_store):
        assert isinstance(resolve_tenant(user_admin.id, db_session, db_session), TenantContext)
        assert f"user:{user_admin.id}:org" in redis_store

        user_admin.actif = False
        db_session.commit()
        assert isinstance(resolve_tenant(user_admin.id, db_session, db_session), TenantContext)

        invalidate_membership(user_admin.id)

        assert resolve_tenant(user_admin.id, db_session, db_session) == AuthFailure()

    def test_invalidate_all(self, db_session, user_admin, user_manager, redis_store):
        resolve_tenant(user_admin.id, db_session, db_session)
        resolve_tenant(user_manager.id, db_session, db_session)
        assert len(redis_store) == 2

        invalidate_all_memberships()

        assert redis_store == {}
