"""
Dépendances d'authentification par token Bearer.

Les tokens sont émis par le fournisseur d'authentification ; l'API
vérifie seulement leur signature et leur audience (voir core.security.jwt).

Deux niveaux :
- get_tenant_resolution (core.auth.tenant_resolver) pour les actions de
  données, qui ne lève jamais
- get_current_identity ci-dessous pour les endpoints qui ont besoin du
  token brut (appel au fournisseur au nom de l'utilisateur), et qui
  répondent 401 si le token est absent ou invalide
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from formalis.core.errors import NOT_AUTHENTICATED
from formalis.core.security.jwt import verify_token

# Security scheme pour le token Bearer
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Identity:
    """Identité portée par un token d'accès valide."""
    user_id: UUID
    email: Optional[str]
    access_token: str


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """
    Dépendance pour obtenir l'identité courante depuis le JWT.

    Raises:
        HTTPException 401: Token manquant ou invalide

    Returns:
        Identity: sujet, email et token brut
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NOT_AUTHENTICATED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_token(credentials.credentials)
        user_id = UUID(str(payload["sub"]))
    except (JWTError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token invalide: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Identity(
        user_id=user_id,
        email=payload.get("email"),
        access_token=credentials.credentials,
    )
