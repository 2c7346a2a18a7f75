"""
Module Historique API.

Journal des événements d'une fiche ou d'une entreprise.
"""
from formalis.api.v1.historique.routes import router

__all__ = ["router"]
