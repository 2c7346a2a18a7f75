"""
Module CRM - Entreprises clientes.
"""

from formalis.models.crm.entreprise import Entreprise

__all__ = ["Entreprise"]
