"""
Module Activités API.

Notes, appels et rendez-vous saisis sur une fiche.
"""
from formalis.api.v1.activites.routes import router

__all__ = ["router"]
