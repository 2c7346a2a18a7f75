"""
Fixtures pytest partagées pour les tests Formalis.

Ce module fournit :
- Une base de données SQLite en mémoire (rapide, isolée par test)
- Deux organisations avec leurs utilisateurs (admin, manager, user)
- Un fournisseur d'authentification simulé (transport httpx en mémoire)
- Des clients FastAPI authentifiés par un vrai JWT

IMPORTANT - Multi-tenant:
- Toutes les tables métier portent organisation_id
- `other_organisation` sert à vérifier qu'aucune donnée ne traverse
  la frontière d'organisation
"""

import json
import os
import secrets
import uuid
from typing import Any, Dict, Generator, List, Optional

# Avant tout import de formalis : pas de Redis ni de Resend pendant les tests
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_URL"] = ""
os.environ["RESEND_API_KEY"] = ""

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from formalis.core.auth.provider import AuthProvider, get_auth_provider
from formalis.core.auth.tenant_resolver import TenantContext
from formalis.core.security.jwt import create_access_token, verify_token
from formalis.database.base_class import Base
from formalis.database.session_rls import get_db, get_db_no_rls
from formalis.main import app
from formalis.models import Organisation, Utilisateur
from formalis.models.enums import UserRole
from formalis.services.storage import LocalStorage, get_storage

AUTH_BASE_URL = "http://auth.test"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def engine():
    """
    Crée un engine SQLite en mémoire pour les tests.

    pysqlite gère mal les SAVEPOINT : la transaction est démarrée
    explicitement (BEGIN) pour que les commit() du code testé ne
    deviennent que des libérations de savepoint.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,  # Mettre True pour debug SQL
    )

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Session isolée : tout est annulé en fin de test, même après commit().

    Mêmes options que SessionLocal (autoflush et expire_on_commit désactivés).

    Un rollback() du code testé annule le savepoint courant : les données
    préparées avant un chemin d'erreur doivent être commitées, pas
    seulement flushées.
    """
    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
        expire_on_commit=False,
    )

    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


# =============================================================================
# MODEL FIXTURES - Organisations et utilisateurs
# =============================================================================

def make_user(db_session: Session, organisation: Organisation, role: UserRole, email: str,
              prenom: str = "Test", nom: str = "Utilisateur") -> Utilisateur:
    user = Utilisateur(
        id=uuid.uuid4(),
        organisation_id=organisation.id,
        email=email,
        prenom=prenom,
        nom=nom,
        role=role.value,
        actif=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def organisation(db_session: Session) -> Organisation:
    """Organisme de formation de test."""
    organisation = Organisation(nom="Centre de Formation Test", slug="cf-test")
    db_session.add(organisation)
    db_session.commit()
    return organisation


@pytest.fixture
def other_organisation(db_session: Session) -> Organisation:
    """Second organisme (vérification de l'isolation)."""
    organisation = Organisation(nom="Autre Organisme", slug="autre-of")
    db_session.add(organisation)
    db_session.commit()
    return organisation


@pytest.fixture
def user_admin(db_session: Session, organisation: Organisation) -> Utilisateur:
    return make_user(db_session, organisation, UserRole.ADMIN, "admin@cf-test.fr", "Alice", "Martin")


@pytest.fixture
def user_manager(db_session: Session, organisation: Organisation) -> Utilisateur:
    return make_user(db_session, organisation, UserRole.MANAGER, "manager@cf-test.fr", "Marc", "Petit")


@pytest.fixture
def user_simple(db_session: Session, organisation: Organisation) -> Utilisateur:
    return make_user(db_session, organisation, UserRole.USER, "user@cf-test.fr", "Ursula", "Leroy")


@pytest.fixture
def other_admin(db_session: Session, other_organisation: Organisation) -> Utilisateur:
    return make_user(db_session, other_organisation, UserRole.ADMIN, "admin@autre-of.fr", "Oscar", "Bernard")


def make_context(db_session: Session, user: Utilisateur) -> TenantContext:
    """TenantContext résolu pour un utilisateur (services appelés directement)."""
    return TenantContext(
        organisation_id=user.organisation_id,
        user_id=user.id,
        role=UserRole(user.role),
        user_nom=user.nom_complet,
        db=db_session,
        admin_db=db_session,
    )


@pytest.fixture
def admin_ctx(db_session: Session, user_admin: Utilisateur) -> TenantContext:
    return make_context(db_session, user_admin)


@pytest.fixture
def user_ctx(db_session: Session, user_simple: Utilisateur) -> TenantContext:
    return make_context(db_session, user_simple)


@pytest.fixture
def other_ctx(db_session: Session, other_admin: Utilisateur) -> TenantContext:
    return make_context(db_session, other_admin)


# =============================================================================
# FOURNISSEUR D'AUTHENTIFICATION SIMULÉ
# =============================================================================

class FakeAuthServer:
    """
    API compatible GoTrue en mémoire, branchée via httpx.MockTransport.

    Couvre les endpoints appelés par AuthProvider. `fail_with` force
    un statut d'erreur sur toutes les requêtes.
    """

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.passwords: Dict[str, str] = {}
        self.links: Dict[str, str] = {}
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[int] = None

    def add_user(self, email: str, user_id: Optional[uuid.UUID] = None,
                 user_metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        user = {
            "id": str(user_id or uuid.uuid4()),
            "email": email,
            "user_metadata": user_metadata or {},
        }
        self.users[user["id"]] = user
        return user

    def issue_link(self, user_id: str) -> str:
        """hashed_token valable une fois pour ce compte."""
        hashed_token = f"hash-{secrets.token_hex(8)}"
        self.links[hashed_token] = user_id
        return hashed_token

    def _find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        for user in self.users.values():
            if user["email"].lower() == email.lower():
                return user
        return None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"msg": "Service indisponible"})

        method, path = request.method, request.url.path
        body = json.loads(request.content) if request.content else {}

        if method == "GET" and path == "/auth/v1/admin/users":
            return httpx.Response(200, json={"users": list(self.users.values())})

        if method == "POST" and path == "/auth/v1/admin/users":
            if self._find_by_email(body["email"]):
                return httpx.Response(422, json={"msg": "A user with this email address has already been registered"})
            user = self.add_user(body["email"], user_metadata=body.get("user_metadata"))
            self.passwords[user["id"]] = body["password"]
            return httpx.Response(200, json=user)

        if method == "GET" and path.startswith("/auth/v1/admin/users/"):
            user = self.users.get(path.rsplit("/", 1)[-1])
            if user is None:
                return httpx.Response(404, json={"msg": "User not found"})
            return httpx.Response(200, json=user)

        if method == "POST" and path == "/auth/v1/admin/generate_link":
            user = self._find_by_email(body["email"])
            if user is None:
                return httpx.Response(404, json={"msg": "User not found"})
            hashed_token = self.issue_link(user["id"])
            return httpx.Response(200, json={
                "properties": {"hashed_token": hashed_token, "action_link": f"{AUTH_BASE_URL}/verify"},
            })

        if method == "POST" and path == "/auth/v1/verify":
            user_id = self.links.pop(body.get("token_hash"), None)
            if user_id is None:
                return httpx.Response(403, json={"msg": "Token has expired or is invalid"})
            user = self.users[user_id]
            return httpx.Response(200, json={
                "access_token": create_access_token({"sub": user_id, "email": user["email"]}),
                "refresh_token": f"refresh-{secrets.token_hex(4)}",
                "expires_in": 3600,
                "user": user,
            })

        if method == "PUT" and path == "/auth/v1/user":
            token = request.headers.get("Authorization", "").removeprefix("Bearer ")
            user_id = str(verify_token(token)["sub"])
            self.passwords[user_id] = body["password"]
            return httpx.Response(200, json=self.users.get(user_id, {"id": user_id}))

        return httpx.Response(404, json={"msg": f"Route inconnue {method} {path}"})


@pytest.fixture
def auth_server() -> FakeAuthServer:
    return FakeAuthServer()


@pytest.fixture
def auth_provider(auth_server: FakeAuthServer) -> AuthProvider:
    return AuthProvider(
        base_url=AUTH_BASE_URL,
        service_key="service-role-test",
        anon_key="anon-test",
        transport=httpx.MockTransport(auth_server.handler),
    )


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    """Stockage des pièces jointes dans un répertoire temporaire."""
    return LocalStorage(str(tmp_path / "uploads"), "/uploads/tickets")


# =============================================================================
# API TEST FIXTURES
# =============================================================================

def auth_headers(user: Utilisateur) -> Dict[str, str]:
    """Headers Bearer avec un token d'accès au format du fournisseur."""
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    """Headers Bearer d'un utilisateur donné (plusieurs rôles dans un même test)."""
    return auth_headers


@pytest.fixture
def api_client(db_session: Session, auth_provider: AuthProvider, storage: LocalStorage) -> Generator[TestClient, None, None]:
    """
    Client de test FastAPI sans authentification.

    Cette fixture :
    1. Override get_db et get_db_no_rls pour utiliser SQLite de test
    2. Override get_auth_provider pour le fournisseur simulé
    3. Override get_storage pour un répertoire temporaire

    La résolution du tenant reste la vraie (JWT -> utilisateur -> organisation).
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_no_rls] = override_get_db
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def client(api_client: TestClient, user_admin: Utilisateur) -> TestClient:
    """Client authentifié en tant qu'admin de `organisation`."""
    api_client.headers.update(auth_headers(user_admin))
    return api_client


@pytest.fixture
def client_as_manager(api_client: TestClient, user_manager: Utilisateur) -> TestClient:
    api_client.headers.update(auth_headers(user_manager))
    return api_client


@pytest.fixture
def client_as_user(api_client: TestClient, user_simple: Utilisateur) -> TestClient:
    """Client authentifié en tant qu'utilisateur standard (rôle user)."""
    api_client.headers.update(auth_headers(user_simple))
    return api_client


@pytest.fixture
def client_other_org(api_client: TestClient, other_admin: Utilisateur) -> TestClient:
    """Client authentifié en tant qu'admin de `other_organisation`."""
    api_client.headers.update(auth_headers(other_admin))
    return api_client


# --- Instructions de lancement des tests --- #
"""
Pour lancer les tests :
   pip install -e ".[test]"
   pytest tests/ -v --tb=short
"""
