"""
Module Entreprises API.

Entreprises clientes (CRM), portée des requêtes "historique d'une entreprise".
"""
from formalis.api.v1.entreprises.routes import router

__all__ = ["router"]
