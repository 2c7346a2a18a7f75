"""
Conversion des lignes ORM vers les formes publiques de l'API.

Fonctions pures : elles renomment les champs, convertissent les colonnes
texte en énumérations (repli sur la valeur brute si inconnue) et donnent
None pour tout attribut optionnel absent. Elles ne lèvent pas.
"""

from typing import Any, Callable, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel

from formalis.models.enums import (
    ACTION_LABELS,
    MODULE_LABELS,
    ORIGINE_LABELS,
    HistoriqueAction,
    HistoriqueModule,
    HistoriqueOrigine,
    label_for,
    parse_enum,
)

S = TypeVar("S", bound=BaseModel)


def attr(row: Any, name: str, default: Any = None) -> Any:
    """Attribut d'une ligne, ou `default` s'il est absent ou NULL."""
    value = getattr(row, name, None)
    return default if value is None else value


def to_schema(schema: Type[S], row: Any) -> S:
    """Ligne ORM -> schéma pydantic (from_attributes)."""
    return schema.model_validate(row, from_attributes=True)


def map_rows(rows: Iterable[Any], mapper: Callable[[Any], S]) -> List[S]:
    return [mapper(row) for row in rows]


def map_historique_event(row: Any) -> Dict[str, Any]:
    """
    HistoriqueEvent -> forme publique.

    created_at devient `date`, la colonne `metadata` devient `metadata`,
    module/action/origine sont fermés en énumérations.
    """
    module = parse_enum(HistoriqueModule, attr(row, "module"))
    action = parse_enum(HistoriqueAction, attr(row, "action"))
    origine = parse_enum(HistoriqueOrigine, attr(row, "origine")) or HistoriqueOrigine.BACKOFFICE

    return {
        "id": attr(row, "id"),
        "date": attr(row, "created_at"),
        "module": module,
        "module_label": label_for(MODULE_LABELS, module),
        "action": action,
        "action_label": label_for(ACTION_LABELS, action),
        "description": attr(row, "description", ""),
        "entite_label": attr(row, "entite_label"),
        "entite_id": attr(row, "entite_id"),
        "objet_href": attr(row, "objet_href"),
        "user_nom": attr(row, "user_nom"),
        "user_role": attr(row, "user_role"),
        "origine": origine,
        "origine_label": label_for(ORIGINE_LABELS, origine),
        "agence_nom": attr(row, "agence_nom"),
        "metadata": attr(row, "event_metadata"),
    }


def map_activite(row: Any) -> Dict[str, Any]:
    """Activite -> forme publique (auteur dénormalisé)."""
    auteur = attr(row, "auteur")
    return {
        "id": attr(row, "id"),
        "contenu": attr(row, "contenu", ""),
        "entite_type": attr(row, "entite_type"),
        "entite_id": attr(row, "entite_id"),
        "auteur_id": attr(row, "auteur_id"),
        "auteur_nom": auteur.nom_complet if auteur is not None else None,
        "created_at": attr(row, "created_at"),
    }


def map_ticket(row: Any) -> Dict[str, Any]:
    """Ticket -> ligne de liste (entreprise et assigné aplatis)."""
    entreprise = attr(row, "entreprise")
    assignee = attr(row, "assignee")
    return {
        "id": attr(row, "id"),
        "numero_affichage": attr(row, "numero_affichage", ""),
        "titre": attr(row, "titre", ""),
        "description": attr(row, "description"),
        "statut": attr(row, "statut"),
        "priorite": attr(row, "priorite"),
        "categorie": attr(row, "categorie"),
        "auteur_nom": attr(row, "auteur_nom"),
        "auteur_type": attr(row, "auteur_type"),
        "entreprise_id": attr(row, "entreprise_id"),
        "entreprise_nom": entreprise.nom if entreprise is not None else None,
        "assignee_id": attr(row, "assignee_id"),
        "assignee_nom": assignee.nom_complet if assignee is not None else None,
        "resolved_at": attr(row, "resolved_at"),
        "closed_at": attr(row, "closed_at"),
        "created_at": attr(row, "created_at"),
        "updated_at": attr(row, "updated_at"),
    }
