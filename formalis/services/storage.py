"""
Stockage des pièces jointes des tickets.

Le backend par défaut écrit dans un répertoire local (UPLOAD_DIR) et
expose les fichiers sous UPLOAD_BASE_URL. Les chemins sont préfixés par
l'organisation puis par le ticket ("drafts" tant que le ticket n'existe pas).
"""

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from uuid import UUID

from formalis.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})

DRAFTS_FOLDER = "drafts"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class UploadRejectedError(Exception):
    """Fichier refusé (absent, type non supporté, trop volumineux)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StorageError(Exception):
    """Échec d'écriture dans le backend de stockage."""
    pass


@dataclass
class StoredFile:
    url: str
    nom: str
    taille: int
    mime_type: str


def safe_filename(filename: str) -> str:
    """Remplace les caractères hors [a-zA-Z0-9._-] par '_' (100 caractères max)."""
    return _UNSAFE_CHARS.sub("_", filename or "fichier")[:100]


def build_storage_path(organisation_id: UUID, ticket_id: Optional[str], filename: str) -> str:
    """
    {organisation}/{ticket|drafts}/{timestamp ms}_{aléa}_{nom nettoyé}

    L'aléa évite les collisions entre deux envois du même fichier dans
    la même milliseconde.
    """
    folder = safe_filename(ticket_id) if ticket_id else DRAFTS_FOLDER
    timestamp = int(time.time() * 1000)
    return f"{organisation_id}/{folder}/{timestamp}_{secrets.token_hex(4)}_{safe_filename(filename)}"


def check_upload(filename: Optional[str], content_type: Optional[str], size: int) -> None:
    """
    Raises:
        UploadRejectedError: Fichier absent, type ou taille refusés
    """
    if not filename:
        raise UploadRejectedError("Aucun fichier fourni")
    if content_type not in ALLOWED_MIME_TYPES:
        raise UploadRejectedError(
            f"Type de fichier non supporté: {content_type}. Types acceptés: images, PDF, Word"
        )
    if size > settings.UPLOAD_MAX_BYTES:
        max_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
        raise UploadRejectedError(f"Le fichier dépasse la taille maximale de {max_mb} Mo")


class LocalStorage:
    """Backend disque local."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def save(self, path: str, content: bytes) -> str:
        """
        Écrit le fichier (jamais d'écrasement) et retourne son URL publique.

        Raises:
            StorageError: Fichier déjà présent ou erreur disque
        """
        target = self.root / path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"[storage] Écriture impossible de {path}: {e}")
            raise StorageError(str(e))
        return f"{self.base_url}/{path}"


def get_storage() -> LocalStorage:
    """Dépendance FastAPI (surchargée dans les tests)."""
    return LocalStorage(settings.UPLOAD_DIR, settings.UPLOAD_BASE_URL)
