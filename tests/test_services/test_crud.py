"""
Tests du repository générique limité à une organisation.
"""

import uuid

import pytest
from sqlalchemy import select

from formalis.core.errors import DuplicateError, NotFoundError
from formalis.models import FonctionPredefinie, Salle
from formalis.services.crud import TenantScopedRepository, row_to_dict


@pytest.fixture
def salles(db_session, organisation):
    return TenantScopedRepository(Salle, db_session, organisation.id, not_found_message="Salle non trouvée")


@pytest.fixture
def other_salles(db_session, other_organisation):
    return TenantScopedRepository(Salle, db_session, other_organisation.id, not_found_message="Salle non trouvée")


class TestCreateAndGet:

    def test_create_sets_organisation(self, salles, organisation):
        salle = salles.create({"nom": "Salle A", "capacite": 12})

        assert salle.organisation_id == organisation.id
        assert salle.actif is True
        assert salles.get(salle.id).nom == "Salle A"

    def test_get_unknown(self, salles):
        with pytest.raises(NotFoundError, match="Salle non trouvée"):
            salles.get(uuid.uuid4())

    def test_get_other_organisation_is_not_found(self, salles, other_salles):
        salle = other_salles.create({"nom": "Salle de l'autre"})

        with pytest.raises(NotFoundError):
            salles.get(salle.id)
        assert salles.exists(salle.id) is False
        assert other_salles.exists(salle.id) is True

    def test_row_to_dict(self, salles):
        salle = salles.create({"nom": "Salle A"})
        data = row_to_dict(salle)

        assert data["nom"] == "Salle A"
        assert data["id"] == salle.id


class TestUpdate:

    def test_update(self, salles):
        salle = salles.create({"nom": "Salle A"})
        updated = salles.update(salle.id, {"nom": "Salle B", "capacite": 20})

        assert updated.nom == "Salle B"
        assert updated.capacite == 20
        assert updated.updated_at is not None

    def test_update_other_organisation_changes_nothing(self, db_session, salles, other_salles):
        salle = other_salles.create({"nom": "Intacte"})

        with pytest.raises(NotFoundError):
            salles.update(salle.id, {"nom": "Piratée"})

        stored = db_session.execute(select(Salle.nom).where(Salle.id == salle.id)).scalar_one()
        assert stored == "Intacte"

    def test_empty_update_returns_row(self, salles):
        salle = salles.create({"nom": "Salle A"})
        assert salles.update(salle.id, {}).nom == "Salle A"


class TestBulkFlags:

    def test_soft_delete_own_rows_only(self, db_session, salles, other_salles):
        own = [salles.create({"nom": f"Salle {i}"}) for i in range(2)]
        foreign = other_salles.create({"nom": "Salle étrangère"})

        count = salles.soft_delete([own[0].id, own[1].id, foreign.id])

        assert count == 2
        actifs = dict(db_session.execute(select(Salle.id, Salle.actif)).all())
        assert actifs[own[0].id] is False
        assert actifs[foreign.id] is True

    def test_only_foreign_ids_is_not_found(self, salles, other_salles):
        foreign = other_salles.create({"nom": "Salle étrangère"})
        with pytest.raises(NotFoundError):
            salles.soft_delete([foreign.id])

    def test_duplicate_ids_counted_once(self, salles):
        salle = salles.create({"nom": "Salle A"})
        assert salles.set_flag([salle.id, salle.id], {"capacite": 5}) == 1

    def test_empty_ids(self, salles):
        assert salles.set_flag([], {"actif": False}) == 0


class TestHardDelete:

    def test_hard_delete(self, salles):
        salle = salles.create({"nom": "Salle A"})
        salles.hard_delete(salle.id)
        assert salles.exists(salle.id) is False

    def test_hard_delete_other_organisation(self, salles, other_salles):
        salle = other_salles.create({"nom": "Salle étrangère"})

        with pytest.raises(NotFoundError):
            salles.hard_delete(salle.id)
        assert other_salles.exists(salle.id) is True


class TestDuplicates:

    @pytest.fixture
    def fonctions(self, db_session, organisation):
        return TenantScopedRepository(
            FonctionPredefinie,
            db_session,
            organisation.id,
            duplicate_message="Cette fonction existe déjà",
            duplicate_field="nom",
        )

    def test_duplicate_on_create(self, fonctions):
        fonctions.create({"nom": "Formateur", "ordre": 1})

        with pytest.raises(DuplicateError) as exc_info:
            fonctions.create({"nom": "Formateur", "ordre": 2})

        assert exc_info.value.message == "Cette fonction existe déjà"
        assert exc_info.value.field == "nom"

    def test_duplicate_on_update(self, fonctions):
        fonctions.create({"nom": "Formateur"})
        other = fonctions.create({"nom": "Comptable"})

        with pytest.raises(DuplicateError):
            fonctions.update(other.id, {"nom": "Formateur"})

    def test_same_name_in_other_organisation(self, db_session, fonctions, other_organisation):
        fonctions.create({"nom": "Formateur"})
        other = TenantScopedRepository(FonctionPredefinie, db_session, other_organisation.id)
        assert other.create({"nom": "Formateur"}).nom == "Formateur"
