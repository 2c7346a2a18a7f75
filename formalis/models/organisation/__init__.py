"""
Module Organisation - Tenants, utilisateurs et compteurs.
"""

from formalis.models.organisation.organisation import Organisation
from formalis.models.organisation.utilisateur import Utilisateur
from formalis.models.organisation.sequence import Sequence

__all__ = [
    "Organisation",
    "Utilisateur",
    "Sequence",
]
