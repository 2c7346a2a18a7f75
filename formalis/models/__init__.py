"""
Import centralisé de tous les modèles.

Ce fichier importe tous les modèles pour que SQLAlchemy et Alembic
puissent découvrir les métadonnées de toutes les tables.

Usage dans Alembic (env.py):
    from formalis.models import Base
    target_metadata = Base.metadata

Usage pour créer les tables:
    from formalis.models import Base
    from formalis.database.session import engine
    Base.metadata.create_all(bind=engine)
"""

from formalis.database.base_class import Base

# L'ordre est important : les tables référencées doivent être importées en premier

# =============================================================================
# 1. Organisation (tenant) et utilisateurs
# =============================================================================
from formalis.models.organisation import Organisation, Utilisateur, Sequence

# =============================================================================
# 2. Référentiels et CRM
# =============================================================================
from formalis.models.parametres import Salle, FonctionPredefinie
from formalis.models.crm import Entreprise

# =============================================================================
# 3. Extranet, support, communication
# =============================================================================
from formalis.models.extranet import ExtranetAcces
from formalis.models.support import Ticket
from formalis.models.communication import EmailEnvoye

# =============================================================================
# 4. Historique
# =============================================================================
from formalis.models.historique import HistoriqueEvent, Activite


__all__ = [
    "Base",
    # Organisation
    "Organisation",
    "Utilisateur",
    "Sequence",
    # Paramètres / CRM
    "Salle",
    "FonctionPredefinie",
    "Entreprise",
    # Extranet / support / communication
    "ExtranetAcces",
    "Ticket",
    "EmailEnvoye",
    # Historique
    "HistoriqueEvent",
    "Activite",
]
