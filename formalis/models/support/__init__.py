"""
Module Support - Tickets.
"""

from formalis.models.support.ticket import Ticket

__all__ = ["Ticket"]
