"""
Module Salles API.
"""
from formalis.api.v1.salles.routes import router

__all__ = ["router"]
