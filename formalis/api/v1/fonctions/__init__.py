"""
Module Fonctions API.

Intitulés de poste proposés pour les contacts.
"""
from formalis.api.v1.fonctions.routes import router

__all__ = ["router"]
