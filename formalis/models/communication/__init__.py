"""
Module Communication - Emails transactionnels.
"""

from formalis.models.communication.email_envoye import EmailEnvoye

__all__ = ["EmailEnvoye"]
