"""
Module Extranet API.

Invitation des formateurs, apprenants et contacts clients à l'extranet.
"""
from formalis.api.v1.extranet.routes import router

__all__ = ["router"]
