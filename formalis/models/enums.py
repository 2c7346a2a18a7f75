"""
Énumérations partagées par les modèles, les schémas et les filtres.

Les valeurs sont stockées en texte libre en base : les énumérations
ferment l'ensemble côté Python et `parse_enum` fournit un repli
explicite pour les valeurs stockées inconnues.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Type, TypeVar, Union

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value: Optional[str]) -> Union[E, str, None]:
    """
    Convertit une valeur stockée en membre d'énumération.

    Une valeur inconnue est conservée brute (et journalisée) plutôt que de
    lever : la base peut contenir des valeurs plus récentes que le code.
    """
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"[enums] Valeur inconnue {value!r} pour {enum_cls.__name__}")
        return value


# =============================================================================
# RÔLES
# =============================================================================

class UserRole(str, Enum):
    """Rôles des utilisateurs du back-office."""
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class ExtranetRole(str, Enum):
    """Rôles des comptes extranet."""
    FORMATEUR = "formateur"
    APPRENANT = "apprenant"
    CONTACT_CLIENT = "contact_client"


class ExtranetStatut(str, Enum):
    """Cycle de vie d'un accès extranet."""
    INVITE = "invite"            # Invitation envoyée, mot de passe non défini
    EN_ATTENTE = "en_attente"    # Compte créé, en attente d'activation
    ACTIF = "actif"              # Mot de passe défini
    DESACTIVE = "desactive"      # Accès révoqué


# Page d'accueil extranet par rôle
EXTRANET_ROUTES: Dict[ExtranetRole, str] = {
    ExtranetRole.FORMATEUR: "/extranet/formateur",
    ExtranetRole.APPRENANT: "/extranet/apprenant",
    ExtranetRole.CONTACT_CLIENT: "/extranet/client",
}

ROLE_LABELS: Dict[str, str] = {
    "admin": "Admin",
    "manager": "Manager",
    "user": "Utilisateur",
    "formateur": "Formateur",
    "apprenant": "Apprenant",
    "contact_client": "Contact client",
}


# =============================================================================
# HISTORIQUE
# =============================================================================

class HistoriqueModule(str, Enum):
    """Module métier concerné par un événement."""
    ENTREPRISE = "entreprise"
    APPRENANT = "apprenant"
    CONTACT_CLIENT = "contact_client"
    FORMATEUR = "formateur"
    FINANCEUR = "financeur"
    PRODUIT = "produit"
    SESSION = "session"
    INSCRIPTION = "inscription"
    DEVIS = "devis"
    FACTURE = "facture"
    AVOIR = "avoir"
    TACHE = "tache"
    ACTIVITE = "activite"
    SALLE = "salle"
    EMAIL = "email"
    ORGANISATION = "organisation"
    QUESTIONNAIRE = "questionnaire"
    OPPORTUNITE = "opportunite"
    TICKET = "ticket"
    DOCUMENT = "document"


class HistoriqueAction(str, Enum):
    """Nature de l'événement."""
    CREATED = "created"
    UPDATED = "updated"
    ARCHIVED = "archived"
    UNARCHIVED = "unarchived"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"
    LINKED = "linked"
    UNLINKED = "unlinked"
    IMPORTED = "imported"
    SENT = "sent"
    SIGNED = "signed"
    COMPLETED = "completed"
    GENERATED = "generated"
    REPLIED = "replied"
    ASSIGNED = "assigned"
    ALERT_TRIGGERED = "alert_triggered"


class HistoriqueOrigine(str, Enum):
    """Surface ayant déclenché l'événement."""
    BACKOFFICE = "backoffice"
    EXTRANET = "extranet"
    SYSTEME = "systeme"


MODULE_LABELS: Dict[HistoriqueModule, str] = {
    HistoriqueModule.ENTREPRISE: "Entreprise",
    HistoriqueModule.APPRENANT: "Apprenant",
    HistoriqueModule.CONTACT_CLIENT: "Contact",
    HistoriqueModule.FORMATEUR: "Formateur",
    HistoriqueModule.FINANCEUR: "Financeur",
    HistoriqueModule.PRODUIT: "Produit",
    HistoriqueModule.SESSION: "Session",
    HistoriqueModule.INSCRIPTION: "Inscription",
    HistoriqueModule.DEVIS: "Devis",
    HistoriqueModule.FACTURE: "Facture",
    HistoriqueModule.AVOIR: "Avoir",
    HistoriqueModule.TACHE: "Tâche",
    HistoriqueModule.ACTIVITE: "Activité",
    HistoriqueModule.SALLE: "Salle",
    HistoriqueModule.EMAIL: "Email",
    HistoriqueModule.ORGANISATION: "Organisation",
    HistoriqueModule.QUESTIONNAIRE: "Questionnaire",
    HistoriqueModule.OPPORTUNITE: "Opportunité",
    HistoriqueModule.TICKET: "Ticket",
    HistoriqueModule.DOCUMENT: "Document",
}

ACTION_LABELS: Dict[HistoriqueAction, str] = {
    HistoriqueAction.CREATED: "Création",
    HistoriqueAction.UPDATED: "Modification",
    HistoriqueAction.ARCHIVED: "Archivage",
    HistoriqueAction.UNARCHIVED: "Désarchivage",
    HistoriqueAction.DELETED: "Suppression",
    HistoriqueAction.STATUS_CHANGED: "Changement de statut",
    HistoriqueAction.LINKED: "Association",
    HistoriqueAction.UNLINKED: "Dissociation",
    HistoriqueAction.IMPORTED: "Import",
    HistoriqueAction.SENT: "Envoi",
    HistoriqueAction.SIGNED: "Signature",
    HistoriqueAction.COMPLETED: "Terminé",
    HistoriqueAction.GENERATED: "Génération",
    HistoriqueAction.REPLIED: "Réponse",
    HistoriqueAction.ASSIGNED: "Assignation",
    HistoriqueAction.ALERT_TRIGGERED: "Alerte budget",
}

ORIGINE_LABELS: Dict[HistoriqueOrigine, str] = {
    HistoriqueOrigine.BACKOFFICE: "Back-office",
    HistoriqueOrigine.EXTRANET: "Extranet",
    HistoriqueOrigine.SYSTEME: "Système",
}


def label_for(labels: Dict[E, str], value: Union[E, str, None]) -> Optional[str]:
    """Libellé français d'une valeur, ou la valeur brute si elle est inconnue."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return labels.get(value, value.value)
    return value


# =============================================================================
# TICKETS
# =============================================================================

class TicketStatut(str, Enum):
    OUVERT = "ouvert"
    EN_COURS = "en_cours"
    EN_ATTENTE = "en_attente"
    RESOLU = "resolu"
    FERME = "ferme"


class TicketPriorite(str, Enum):
    BASSE = "basse"
    NORMALE = "normale"
    HAUTE = "haute"
    URGENTE = "urgente"


class TicketCategorie(str, Enum):
    BUG = "bug"
    DEMANDE = "demande"
    QUESTION = "question"
    AMELIORATION = "amelioration"
    AUTRE = "autre"


TICKET_STATUT_LABELS: Dict[TicketStatut, str] = {
    TicketStatut.OUVERT: "Ouvert",
    TicketStatut.EN_COURS: "En cours",
    TicketStatut.EN_ATTENTE: "En attente",
    TicketStatut.RESOLU: "Résolu",
    TicketStatut.FERME: "Fermé",
}


# =============================================================================
# EMAILS
# =============================================================================

class EmailStatut(str, Enum):
    ENVOYE = "envoye"
    ERREUR = "erreur"
