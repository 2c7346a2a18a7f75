"""
Vérification des JWT émis par le fournisseur d'authentification.

L'émission des sessions est déléguée au fournisseur (API compatible GoTrue) ;
l'API se contente de vérifier la signature HS256 et l'audience des tokens
d'accès présentés en Bearer.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from formalis.core.config import settings


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Crée un token d'accès au format du fournisseur.

    Utilisé par les scripts d'administration et les tests ; en production
    les tokens sont émis par le fournisseur.

    Args:
        data: Claims à encoder (sub, email, ...)
        expires_delta: Durée de validité personnalisée

    Returns:
        Token JWT signé
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "aud": settings.AUTH_JWT_AUDIENCE,
        "role": "authenticated",
    })

    return jwt.encode(
        to_encode,
        settings.AUTH_JWT_SECRET,
        algorithm=settings.AUTH_JWT_ALGORITHM,
    )


def verify_token(token: str) -> Dict[str, Any]:
    """
    Vérifie et décode un token d'accès.

    Args:
        token: Token JWT à vérifier

    Returns:
        Payload décodé

    Raises:
        JWTError: Si le token est invalide, expiré ou sans sujet
    """
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options={"require_exp": True},
        )
    except JWTError as e:
        raise JWTError(f"Token validation failed: {str(e)}")

    if not payload.get("sub"):
        raise JWTError("Token sans sujet")

    return payload
