"""
Formalis - API back-office et extranet des organismes de formation.
"""

__version__ = "0.1.0"
