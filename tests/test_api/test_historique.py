"""
Tests API pour l'historique (lecture paginée et filtrée).
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status

from formalis.models import Entreprise, HistoriqueEvent
from formalis.models.enums import HistoriqueAction, HistoriqueModule

URL = "/api/v1/historique"


def add_event(db_session, organisation, entite_id, created_at=None, **overrides):
    values = dict(
        organisation_id=organisation.id,
        module=HistoriqueModule.SALLE.value,
        action=HistoriqueAction.UPDATED.value,
        description="Salle modifiée",
        entite_type="salle",
        entite_id=entite_id,
        user_nom="Alice Martin",
        created_at=created_at or datetime.now(timezone.utc),
    )
    values.update(overrides)
    event = HistoriqueEvent(**values)
    db_session.add(event)
    db_session.commit()
    return event


def entity_params(entite_id, **extra):
    return {"mode": "entity", "entite_type": "salle", "entite_id": str(entite_id), **extra}


class TestEntityMode:

    def test_events_of_one_record(self, client, db_session, organisation):
        salle_id = uuid.uuid4()
        add_event(db_session, organisation, salle_id)
        add_event(db_session, organisation, uuid.uuid4())

        response = client.get(URL, params=entity_params(salle_id))

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["count"] == 1
        assert body["error"] is None
        event = body["data"][0]
        assert event["entite_id"] == str(salle_id)
        assert event["module"] == "salle"
        assert event["module_label"] == "Salle"
        assert event["action_label"] == "Modification"
        assert event["origine"] == "backoffice"
        assert "date" in event

    def test_pagination(self, client, db_session, organisation):
        salle_id = uuid.uuid4()
        start = datetime(2024, 3, 1, tzinfo=timezone.utc)
        for i in range(30):
            add_event(db_session, organisation, salle_id, start + timedelta(minutes=i))

        first = client.get(URL, params=entity_params(salle_id)).json()
        second = client.get(URL, params=entity_params(salle_id, page=2)).json()

        assert (len(first["data"]), first["count"]) == (25, 30)
        assert (len(second["data"]), second["count"]) == (5, 30)
        assert first["data"][0]["date"] > first["data"][-1]["date"]

    def test_page_below_one_is_first_page(self, client, db_session, organisation):
        salle_id = uuid.uuid4()
        add_event(db_session, organisation, salle_id)

        body = client.get(URL, params=entity_params(salle_id, page=0)).json()
        assert len(body["data"]) == 1

    def test_date_bounds_inclusive(self, client, db_session, organisation):
        salle_id = uuid.uuid4()
        for created_at, description in [
            (datetime(2023, 12, 31, 23, 59, 59), "avant"),
            (datetime(2024, 1, 1, 0, 0, 0), "premier jour"),
            (datetime(2024, 1, 31, 23, 59, 59, 999000), "dernier jour"),
            (datetime(2024, 2, 1, 0, 0, 0), "après"),
        ]:
            add_event(db_session, organisation, salle_id, created_at, description=description)

        body = client.get(
            URL, params=entity_params(salle_id, date_debut="2024-01-01", date_fin="2024-01-31")
        ).json()

        assert body["count"] == 2
        assert {e["description"] for e in body["data"]} == {"premier jour", "dernier jour"}

    def test_filters(self, client, db_session, organisation):
        salle_id = uuid.uuid4()
        add_event(db_session, organisation, salle_id, action="created", user_nom="Alice Martin")
        add_event(db_session, organisation, salle_id, action="archived", user_nom="Bob Durand")

        body = client.get(URL, params=entity_params(salle_id, action="archived")).json()
        assert [e["user_nom"] for e in body["data"]] == ["Bob Durand"]

        body = client.get(URL, params=entity_params(salle_id, utilisateur="MARTIN")).json()
        assert [e["action"] for e in body["data"]] == ["created"]

    def test_empty_filters_ignored(self, client, db_session, organisation):
        salle_id = uuid.uuid4()
        add_event(db_session, organisation, salle_id)

        body = client.get(URL, params=entity_params(salle_id, module="", utilisateur="")).json()
        assert body["count"] == 1

    def test_unknown_stored_module_still_listed(self, client, db_session, organisation):
        salle_id = uuid.uuid4()
        add_event(db_session, organisation, salle_id, module="module_futur")

        event = client.get(URL, params=entity_params(salle_id)).json()["data"][0]
        assert event["module"] == "module_futur"
        assert event["module_label"] == "module_futur"

    def test_other_organisation_events_hidden(self, client, db_session, organisation, other_organisation):
        salle_id = uuid.uuid4()
        add_event(db_session, other_organisation, salle_id)

        body = client.get(URL, params=entity_params(salle_id)).json()
        assert body == {"data": [], "count": 0, "error": None}


class TestEntrepriseMode:

    @pytest.fixture
    def entreprise(self, db_session, organisation):
        entreprise = Entreprise(organisation_id=organisation.id, numero_affichage="ENT-0001", nom="ACME")
        db_session.add(entreprise)
        db_session.commit()
        return entreprise

    def test_events_linked_to_entreprise(self, client, db_session, organisation, entreprise):
        add_event(db_session, organisation, uuid.uuid4(), entite_type="ticket", module="ticket",
                  entreprise_id=entreprise.id)
        add_event(db_session, organisation, entreprise.id, entite_type="entreprise", module="entreprise",
                  entreprise_id=entreprise.id)
        add_event(db_session, organisation, uuid.uuid4())

        body = client.get(URL, params={"mode": "entreprise", "entreprise_id": str(entreprise.id)}).json()

        assert body["count"] == 2
        assert {e["module"] for e in body["data"]} == {"ticket", "entreprise"}

    def test_unknown_entreprise(self, client):
        response = client.get(URL, params={"mode": "entreprise", "entreprise_id": str(uuid.uuid4())})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"data": [], "count": 0, "error": "Entreprise non trouvée"}

    def test_entreprise_of_other_organisation(self, client, db_session, other_organisation):
        foreign = Entreprise(organisation_id=other_organisation.id, numero_affichage="ENT-0001", nom="Concurrent")
        db_session.add(foreign)
        db_session.commit()

        response = client.get(URL, params={"mode": "entreprise", "entreprise_id": str(foreign.id)})
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestErrors:

    def test_not_authenticated(self, api_client):
        response = api_client.get(URL, params=entity_params(uuid.uuid4()))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"data": [], "count": 0, "error": "Non authentifié"}

    def test_invalid_token(self, api_client):
        response = api_client.get(
            URL, params=entity_params(uuid.uuid4()), headers={"Authorization": "Bearer pas-un-jwt"}
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.parametrize("params", [
        {"mode": "inconnu"},
        {"mode": "entity", "entite_type": "salle"},
        {"mode": "entreprise"},
        {"mode": "entity", "entite_type": "salle", "entite_id": "pas-un-uuid"},
    ])
    def test_invalid_scope(self, client, params):
        response = client.get(URL, params=params)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["data"] == []
        assert body["error"]

    def test_unknown_filter_value(self, client):
        response = client.get(URL, params=entity_params(uuid.uuid4(), module="module_futur"))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
