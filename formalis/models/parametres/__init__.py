"""
Module Paramètres - Référentiels propres à chaque organisation.
"""

from formalis.models.parametres.salle import Salle
from formalis.models.parametres.fonction import FonctionPredefinie, DEFAULT_FONCTIONS

__all__ = [
    "Salle",
    "FonctionPredefinie",
    "DEFAULT_FONCTIONS",
]
