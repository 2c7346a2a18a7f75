"""
Tests de la validation des entrées de formulaire.
"""

import uuid
from typing import Optional

from formalis.api.v1.activites.schemas import ActiviteCreate
from formalis.api.v1.auth.schemas import SetPasswordInput
from formalis.api.v1.entreprises.schemas import EntrepriseCreate, EntrepriseUpdate
from formalis.api.v1.extranet.schemas import InviteInput
from formalis.api.v1.salles.schemas import SalleInput
from formalis.services.validation import (
    FormSchema,
    IdList,
    clean_empty_strings,
    required_text,
    validate_input,
)


class NestedForm(FormSchema):
    nom: required_text("Le nom est requis") = None
    commentaire: Optional[str] = None


class TestCleanEmptyStrings:

    def test_empty_strings_become_none(self):
        assert clean_empty_strings({"a": "", "b": "x", "c": None, "d": 0}) == {
            "a": None, "b": "x", "c": None, "d": 0,
        }

    def test_idempotent(self):
        data = {"nom": "Salle", "adresse": "", "capacite": 0, "equipements": None}
        once = clean_empty_strings(data)
        assert clean_empty_strings(once) == once

    def test_does_not_mutate_input(self):
        data = {"adresse": ""}
        clean_empty_strings(data)
        assert data == {"adresse": ""}


class TestValidateInput:

    def test_valid(self):
        model, errors = validate_input(SalleInput, {"nom": "Salle A", "capacite": 12})
        assert errors is None
        assert model.nom == "Salle A"
        assert model.capacite == 12

    def test_required_field_messages(self):
        for payload in ({}, {"nom": ""}, {"nom": "   "}):
            model, errors = validate_input(SalleInput, payload)
            assert model is None
            assert errors == {"nom": ["Le nom est requis"]}

    def test_optional_empty_string_is_none(self):
        model, _ = validate_input(SalleInput, {"nom": "Salle A", "adresse": "", "equipements": ""})
        assert model.adresse is None
        assert model.equipements is None

    def test_required_text_is_stripped(self):
        model, _ = validate_input(NestedForm, {"nom": "  Dupont  "})
        assert model.nom == "Dupont"

    def test_max_length(self):
        _, errors = validate_input(SalleInput, {"nom": "x" * 256})
        assert errors == {"nom": ["255 caractères maximum"]}

    def test_business_message_without_prefix(self):
        _, errors = validate_input(SalleInput, {"nom": "Salle A", "capacite": -1})
        assert errors == {"capacite": ["La capacité doit être un nombre positif"]}

    def test_none_payload(self):
        _, errors = validate_input(NestedForm, None)
        assert errors == {"nom": ["Le nom est requis"]}

    def test_model_level_error_under_form_key(self):
        _, errors = validate_input(SetPasswordInput, {"password": "motdepasse", "confirm_password": "autre-chose"})
        assert errors == {"_form": ["Les mots de passe ne correspondent pas"]}

    def test_nested_location_joined(self):
        _, errors = validate_input(IdList, {"ids": ["pas-un-uuid"]})
        assert list(errors) == ["ids.0"]


class TestFormSchemas:

    def test_activite_empty_entity_is_none(self):
        model, errors = validate_input(
            ActiviteCreate, {"contenu": "Appel effectué", "entite_type": "", "entite_id": ""}
        )
        assert errors is None
        assert model.entite_type is None
        assert model.entite_id is None

    def test_entreprise_optional_email(self):
        model, errors = validate_input(EntrepriseCreate, {"nom": "ACME", "email": ""})
        assert errors is None
        assert model.email is None

        _, errors = validate_input(EntrepriseCreate, {"nom": "ACME", "email": "pas-un-email"})
        assert errors == {"email": ["Email invalide"]}

    def test_entreprise_update_is_partial(self):
        model, errors = validate_input(EntrepriseUpdate, {"ville": "Lyon"})
        assert errors is None
        assert model.model_dump(exclude_unset=True) == {"ville": "Lyon"}

    def test_entreprise_update_rejects_empty_nom(self):
        _, errors = validate_input(EntrepriseUpdate, {"nom": ""})
        assert errors == {"nom": ["Le nom est requis"]}

    def test_invite_input(self):
        payload = {
            "entite_type": "formateur",
            "entite_id": str(uuid.uuid4()),
            "email": "",
            "prenom": "Jeanne",
            "nom": "",
        }
        _, errors = validate_input(InviteInput, payload)
        assert errors == {"email": ["Email invalide"], "nom": ["Le nom est requis"]}

    def test_id_list_not_empty(self):
        _, errors = validate_input(IdList, {"ids": []})
        assert errors == {"ids": ["Aucun élément sélectionné"]}

    def test_password_min_length(self):
        _, errors = validate_input(SetPasswordInput, {"password": "court"})
        assert errors == {"password": ["Le mot de passe doit contenir au moins 8 caractères"]}
