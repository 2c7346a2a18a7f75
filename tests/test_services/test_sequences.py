"""
Tests des numéros d'affichage par organisation.
"""

from formalis.services.sequences import next_numero


class TestNextNumero:

    def test_first_number(self, db_session, organisation):
        assert next_numero(db_session, organisation.id, "ENT") == "ENT-0001"

    def test_increments(self, db_session, organisation):
        numeros = [next_numero(db_session, organisation.id, "TIC") for _ in range(3)]
        assert numeros == ["TIC-0001", "TIC-0002", "TIC-0003"]

    def test_counter_per_prefix(self, db_session, organisation):
        next_numero(db_session, organisation.id, "ENT")
        assert next_numero(db_session, organisation.id, "TIC") == "TIC-0001"

    def test_counter_per_organisation(self, db_session, organisation, other_organisation):
        next_numero(db_session, organisation.id, "ENT")
        next_numero(db_session, organisation.id, "ENT")
        assert next_numero(db_session, other_organisation.id, "ENT") == "ENT-0001"
