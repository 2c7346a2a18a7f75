"""
Module Historique - Journal d'événements et activités.
"""

from formalis.models.historique.historique_event import HistoriqueEvent
from formalis.models.historique.activite import Activite

__all__ = [
    "HistoriqueEvent",
    "Activite",
]
