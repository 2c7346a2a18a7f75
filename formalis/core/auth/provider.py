"""
Client du fournisseur d'authentification (API compatible GoTrue).

Le fournisseur émet et vérifie les sessions ; Formalis n'appelle que
quelques endpoints :

- Administration (clé service_role) :
    get_user_by_id()   GET  /auth/v1/admin/users/{id}
    find_user_by_email() GET /auth/v1/admin/users
    create_user()      POST /auth/v1/admin/users
    generate_link()    POST /auth/v1/admin/generate_link
- Public (clé anon) :
    verify_otp()       POST /auth/v1/verify
- Au nom de l'utilisateur (son access token) :
    update_password()  PUT  /auth/v1/user

Usage:
    provider = get_auth_provider()
    link = await provider.generate_link(email)
    session = await provider.verify_otp(link.hashed_token, "magiclink")
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from formalis.core.config import settings


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "AuthProviderError",
    "AuthProviderNotConfiguredError",
    "GeneratedLink",
    "ProviderSession",
    "AuthProvider",
    "get_auth_provider",
]


# =============================================================================
# EXCEPTIONS
# =============================================================================

class AuthProviderError(Exception):
    """Erreur renvoyée par le fournisseur (ou erreur de connexion)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthProviderNotConfiguredError(AuthProviderError):
    """AUTH_PROVIDER_URL ou AUTH_SERVICE_ROLE_KEY manquant."""
    pass


# =============================================================================
# TYPES
# =============================================================================

@dataclass
class GeneratedLink:
    """Lien magique généré par l'API d'administration."""
    action_link: Optional[str]
    hashed_token: str


@dataclass
class ProviderSession:
    """Session ouverte par le fournisseur après vérification d'un OTP."""
    access_token: str
    refresh_token: Optional[str]
    expires_in: int
    user_id: Optional[str]


# =============================================================================
# CLIENT
# =============================================================================

class AuthProvider:
    """
    Client HTTP asynchrone du fournisseur d'authentification.

    Args:
        base_url: URL du fournisseur (défaut: settings.AUTH_PROVIDER_URL)
        service_key: Clé service_role (défaut: settings.AUTH_SERVICE_ROLE_KEY)
        anon_key: Clé publique (défaut: settings.AUTH_ANON_KEY)
        transport: Transport httpx (injection pour les tests)
    """

    TIMEOUT = 15.0

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        anon_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.AUTH_PROVIDER_URL or "").rstrip("/")
        self.service_key = service_key or settings.AUTH_SERVICE_ROLE_KEY
        self.anon_key = anon_key or settings.AUTH_ANON_KEY or self.service_key
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.service_key)

    # =========================================================================
    # HTTP
    # =========================================================================

    def _admin_headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_key or "",
            "Authorization": f"Bearer {self.service_key}",
            "Accept": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        headers: Dict[str, str],
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not self.is_configured:
            raise AuthProviderNotConfiguredError(
                "Fournisseur d'authentification non configuré "
                "(AUTH_PROVIDER_URL / AUTH_SERVICE_ROLE_KEY manquant)"
            )

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.TIMEOUT,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, headers=headers, json=json, params=params)
        except httpx.RequestError as e:
            raise AuthProviderError(f"Erreur de connexion au fournisseur: {str(e)}")

        if response.status_code >= 400:
            error_detail = response.text
            try:
                error_json = response.json()
                error_detail = error_json.get("msg") or error_json.get("error_description") or error_json.get("error") or error_detail
            except ValueError:
                pass
            raise AuthProviderError(
                f"Erreur fournisseur: {response.status_code} - {error_detail}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        return response.json()

    # =========================================================================
    # ADMINISTRATION
    # =========================================================================

    async def get_user_by_id(self, user_id: str) -> Dict[str, Any]:
        """Compte du fournisseur (`id`, `email`, `user_metadata`...)."""
        return await self._request("GET", f"/auth/v1/admin/users/{user_id}", self._admin_headers())

    async def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Recherche un compte par email (insensible à la casse), None si absent."""
        data = await self._request(
            "GET",
            "/auth/v1/admin/users",
            self._admin_headers(),
            params={"page": 1, "per_page": 1000},
        )
        wanted = email.lower()
        for user in data.get("users", []):
            if (user.get("email") or "").lower() == wanted:
                return user
        return None

    async def create_user(self, email: str, password: str, user_metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Crée un compte confirmé (le mot de passe définitif sera choisi par l'utilisateur)."""
        return await self._request(
            "POST",
            "/auth/v1/admin/users",
            self._admin_headers(),
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": user_metadata or {},
            },
        )

    async def generate_link(self, email: str, link_type: str = "magiclink") -> GeneratedLink:
        """Génère un lien magique ; le hashed_token permet d'ouvrir une session côté serveur."""
        data = await self._request(
            "POST",
            "/auth/v1/admin/generate_link",
            self._admin_headers(),
            json={"type": link_type, "email": email},
        )
        properties = data.get("properties", data)
        hashed_token = properties.get("hashed_token")
        if not hashed_token:
            raise AuthProviderError("Lien généré sans hashed_token")
        return GeneratedLink(action_link=properties.get("action_link"), hashed_token=hashed_token)

    # =========================================================================
    # SESSIONS
    # =========================================================================

    async def verify_otp(self, token_hash: str, otp_type: str) -> ProviderSession:
        """Vérifie un token_hash et retourne la session ouverte."""
        data = await self._request(
            "POST",
            "/auth/v1/verify",
            {"apikey": self.anon_key or "", "Accept": "application/json"},
            json={"type": otp_type, "token_hash": token_hash},
        )
        if not data.get("access_token"):
            raise AuthProviderError("Vérification sans session")
        user = data.get("user") or {}
        return ProviderSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=int(data.get("expires_in") or 3600),
            user_id=user.get("id"),
        )

    async def update_password(self, access_token: str, password: str) -> Dict[str, Any]:
        """Change le mot de passe de l'utilisateur porteur du token."""
        return await self._request(
            "PUT",
            "/auth/v1/user",
            {
                "apikey": self.anon_key or "",
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            json={"password": password},
        )


def get_auth_provider() -> AuthProvider:
    """Dépendance FastAPI (remplaçable dans les tests)."""
    return AuthProvider()
