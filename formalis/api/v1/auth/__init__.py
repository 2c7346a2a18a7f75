"""
Module Auth API.

Liens d'invitation extranet, confirmation des liens du fournisseur et
définition du premier mot de passe.
"""
from formalis.api.v1.auth.routes import router

__all__ = ["router"]
