"""
Tests API pour les salles de formation.
"""

import uuid

from fastapi import status
from sqlalchemy import select

from formalis.models import HistoriqueEvent, Salle

URL = "/api/v1/salles"


def add_salle(db_session, organisation, nom, **values):
    salle = Salle(organisation_id=organisation.id, nom=nom, **values)
    db_session.add(salle)
    db_session.commit()
    return salle


class TestListSalles:

    def test_active_only_sorted_by_nom(self, client, db_session, organisation):
        add_salle(db_session, organisation, "Salle B")
        add_salle(db_session, organisation, "Salle A")
        add_salle(db_session, organisation, "Ancienne salle", actif=False)

        body = client.get(URL).json()

        assert body["count"] == 2
        assert [s["nom"] for s in body["data"]] == ["Salle A", "Salle B"]

    def test_search_nom_or_adresse(self, client, db_session, organisation):
        add_salle(db_session, organisation, "Salle Rhône", adresse="Lyon")
        add_salle(db_session, organisation, "Amphi", adresse="12 rue de Lyon, Paris")
        add_salle(db_session, organisation, "Salle Seine", adresse="Paris")

        body = client.get(URL, params={"search": "lyon"}).json()
        assert {s["nom"] for s in body["data"]} == {"Salle Rhône", "Amphi"}

    def test_all_without_pagination(self, client, db_session, organisation):
        for i in range(30):
            add_salle(db_session, organisation, f"Salle {i:02d}", capacite=i)

        body = client.get(f"{URL}/all").json()

        assert body["count"] == 30
        assert set(body["data"][0]) == {"id", "nom", "adresse", "capacite"}

    def test_readable_by_user_role(self, client_as_user, db_session, organisation):
        add_salle(db_session, organisation, "Salle A")
        assert client_as_user.get(URL).json()["count"] == 1


class TestCreateSalle:

    def test_create(self, client, db_session):
        response = client.post(URL, json={
            "nom": "Salle Lumière",
            "adresse": "",
            "capacite": 16,
            "equipements": "Vidéoprojecteur",
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["nom"] == "Salle Lumière"
        assert data["adresse"] is None
        assert data["actif"] is True

        event = db_session.execute(select(HistoriqueEvent)).scalar_one()
        assert (event.module, event.action, event.entite_label) == ("salle", "created", "Salle Lumière")

    def test_manager_can_create(self, client_as_manager):
        response = client_as_manager.post(URL, json={"nom": "Salle du manager"})
        assert response.status_code == status.HTTP_201_CREATED

    def test_user_cannot_create(self, client_as_user, db_session):
        response = client_as_user.post(URL, json={"nom": "Salle interdite"})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {
            "error": {"_form": ["Permission refusée : vous n'avez pas le droit de créer une salle"]}
        }
        assert db_session.execute(select(Salle)).first() is None

    def test_validation_errors(self, client):
        response = client.post(URL, json={"nom": "", "capacite": -3})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == {
            "nom": ["Le nom est requis"],
            "capacite": ["La capacité doit être un nombre positif"],
        }


class TestUpdateSalle:

    def test_update_logs_changed_fields(self, client, db_session, organisation):
        salle = add_salle(db_session, organisation, "Salle A", capacite=10)

        response = client.put(f"{URL}/{salle.id}", json={"nom": "Salle A", "capacite": 14})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["capacite"] == 14

        event = db_session.execute(select(HistoriqueEvent)).scalar_one()
        assert event.action == "updated"
        assert event.event_metadata["changed_fields"] == ["Capacité"]

    def test_no_change_no_event(self, client, db_session, organisation):
        salle = add_salle(db_session, organisation, "Salle A")
        client.put(f"{URL}/{salle.id}", json={"nom": "Salle A"})

        assert db_session.execute(select(HistoriqueEvent)).first() is None

    def test_other_organisation_is_not_found(self, client, db_session, other_organisation):
        foreign = add_salle(db_session, other_organisation, "Salle étrangère")

        response = client.put(f"{URL}/{foreign.id}", json={"nom": "Piratée"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": {"_form": ["Salle non trouvée"]}}
        db_session.refresh(foreign)
        assert foreign.nom == "Salle étrangère"


class TestDeleteSalles:

    def test_soft_delete_admin(self, client, db_session, organisation):
        salles = [add_salle(db_session, organisation, f"Salle {i}") for i in range(2)]

        response = client.post(f"{URL}/delete", json={"ids": [str(s.id) for s in salles]})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True}
        assert db_session.execute(select(Salle).where(Salle.actif.is_(True))).first() is None
        events = db_session.execute(select(HistoriqueEvent)).scalars().all()
        assert len(events) == 2

    def test_manager_cannot_delete(self, api_client, db_session, organisation, user_manager, headers_for):
        salle = add_salle(db_session, organisation, "Salle A")

        response = api_client.post(
            f"{URL}/delete", json={"ids": [str(salle.id)]}, headers=headers_for(user_manager)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"].startswith("Permission refusée")

    def test_empty_selection(self, client):
        response = client.post(f"{URL}/delete", json={"ids": []})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_unknown_ids(self, client):
        response = client.post(f"{URL}/delete", json={"ids": [str(uuid.uuid4())]})
        assert response.status_code == status.HTTP_404_NOT_FOUND
