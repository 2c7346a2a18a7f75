"""
Module Extranet - Accès des personnes externes.
"""

from formalis.models.extranet.extranet_acces import ExtranetAcces

__all__ = ["ExtranetAcces"]
