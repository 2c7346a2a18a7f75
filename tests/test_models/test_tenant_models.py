"""
Tests unitaires des modèles rattachés à une organisation.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from formalis.models import Entreprise, FonctionPredefinie, Organisation, Salle, Ticket, Utilisateur


class TestOrganisation:

    def test_slug_unique(self, db_session, organisation):
        db_session.add(Organisation(nom="Doublon", slug="cf-test"))
        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_defaults(self, organisation):
        assert organisation.actif is True
        assert organisation.created_at is not None


class TestUtilisateur:

    def test_nom_complet(self, user_admin):
        assert user_admin.nom_complet == "Alice Martin"

    @pytest.mark.parametrize("prenom, nom, expected", [
        ("Alice", None, "Alice"),
        (None, "Martin", "Martin"),
        (None, None, "Utilisateur"),
    ])
    def test_nom_complet_partial(self, prenom, nom, expected):
        assert Utilisateur(email="x@y.fr", prenom=prenom, nom=nom, role="user").nom_complet == expected


class TestSalle:

    def test_active_by_default(self, db_session, organisation):
        salle = Salle(organisation_id=organisation.id, nom="Salle A")
        db_session.add(salle)
        db_session.flush()

        assert salle.actif is True
        assert salle.id is not None


class TestFonctionPredefinie:

    def test_nom_unique_per_organisation(self, db_session, organisation):
        db_session.add(FonctionPredefinie(organisation_id=organisation.id, nom="Formateur", ordre=1))
        db_session.flush()

        db_session.add(FonctionPredefinie(organisation_id=organisation.id, nom="Formateur", ordre=2))
        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_same_nom_in_two_organisations(self, db_session, organisation, other_organisation):
        db_session.add(FonctionPredefinie(organisation_id=organisation.id, nom="Formateur", ordre=1))
        db_session.add(FonctionPredefinie(organisation_id=other_organisation.id, nom="Formateur", ordre=1))
        db_session.flush()


class TestNumerotation:

    def test_entreprise_label(self, organisation):
        entreprise = Entreprise(organisation_id=organisation.id, numero_affichage="ENT-0007", nom="ACME")
        assert entreprise.label == "ENT-0007 - ACME"

    def test_ticket_numero_unique_per_organisation(self, db_session, organisation):
        for titre in ("Premier", "Second"):
            db_session.add(Ticket(
                organisation_id=organisation.id,
                numero_affichage="TIC-0001",
                titre=titre,
                auteur_type="admin",
            ))
        with pytest.raises(IntegrityError):
            db_session.flush()

    def test_ticket_defaults(self, db_session, organisation):
        ticket = Ticket(organisation_id=organisation.id, numero_affichage="TIC-0001", titre="Bug", auteur_type="user")
        db_session.add(ticket)
        db_session.flush()

        assert ticket.statut == "ouvert"
        assert ticket.priorite == "normale"
        assert ticket.label == "TIC-0001 - Bug"
