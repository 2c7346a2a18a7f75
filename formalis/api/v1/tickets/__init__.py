"""
Module Tickets API.

Tickets de support : liste filtrée, fiche, création, mise à jour du
statut / de l'assignation, archivage et pièces jointes.
"""
from formalis.api.v1.tickets.routes import router

__all__ = ["router"]
