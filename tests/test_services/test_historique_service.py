"""
Tests de la journalisation dans l'historique.
"""

import uuid
from datetime import date
from unittest.mock import patch

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from formalis.models import HistoriqueEvent
from formalis.models.enums import HistoriqueAction, HistoriqueModule, HistoriqueOrigine, UserRole
from formalis.services.historique import (
    HistoriqueEntry,
    compute_changes,
    log_action,
    log_historique,
    log_historique_batch,
)


def make_entry(organisation, user, **overrides) -> HistoriqueEntry:
    values = dict(
        organisation_id=organisation.id,
        user_id=user.id,
        user_nom=user.nom_complet,
        user_role=UserRole.ADMIN,
        module=HistoriqueModule.SALLE,
        action=HistoriqueAction.CREATED,
        entite_type="salle",
        entite_id=uuid.uuid4(),
        entite_label="Salle A",
        description='Salle "Salle A" créée',
    )
    values.update(overrides)
    return HistoriqueEntry(**values)


def all_events(db_session):
    return db_session.execute(select(HistoriqueEvent)).scalars().all()


class TestComputeChanges:

    def test_changed_fields_only(self):
        changes = compute_changes(
            {"nom": "Salle A", "capacite": 10, "adresse": "Lyon"},
            {"nom": "Salle B", "capacite": 10, "adresse": "Lyon"},
        )

        assert changes == {
            "changed_fields": ["nom"],
            "old_values": {"nom": "Salle A"},
            "new_values": {"nom": "Salle B"},
        }

    def test_labels_and_ignored_fields(self):
        changes = compute_changes(
            {"capacite": 10, "updated_at": None},
            {"capacite": 12, "updated_at": "2024-01-01"},
            field_labels={"capacite": "Capacité"},
        )
        assert changes["changed_fields"] == ["Capacité"]
        assert "updated_at" not in changes["new_values"]

    def test_no_change(self):
        assert compute_changes({"nom": "A"}, {"nom": "A"})["changed_fields"] == []


class TestLogHistorique:

    def test_event_stored(self, db_session, organisation, user_admin):
        entry = make_entry(organisation, user_admin, metadata={"entite_id": uuid.uuid4(), "jour": date(2024, 1, 1)})
        log_historique(db_session, entry)

        [event] = all_events(db_session)
        assert event.module == "salle"
        assert event.action == "created"
        assert event.user_role == "admin"
        assert event.origine == HistoriqueOrigine.BACKOFFICE.value
        assert event.event_metadata["jour"] == "2024-01-01"

    def test_batch(self, db_session, organisation, user_admin):
        entries = [make_entry(organisation, user_admin, action=HistoriqueAction.ARCHIVED) for _ in range(3)]
        log_historique_batch(db_session, entries)

        assert len(all_events(db_session)) == 3

    def test_empty_batch(self, db_session):
        log_historique_batch(db_session, [])
        assert all_events(db_session) == []

    def test_failure_is_swallowed(self, db_session, organisation, user_admin):
        """Un échec d'insertion n'est jamais propagé à l'action appelante."""
        error = OperationalError("INSERT", {}, Exception("disque plein"))
        with patch.object(db_session, "commit", side_effect=error):
            log_historique(db_session, make_entry(organisation, user_admin))

        assert all_events(db_session) == []

    def test_log_action_uses_context_author(self, db_session, admin_ctx):
        log_action(
            admin_ctx,
            module=HistoriqueModule.TICKET,
            action=HistoriqueAction.STATUS_CHANGED,
            entite_type="ticket",
            entite_id=uuid.uuid4(),
            description="Statut modifié",
        )

        [event] = all_events(db_session)
        assert event.organisation_id == admin_ctx.organisation_id
        assert event.user_id == admin_ctx.user_id
        assert event.user_nom == "Alice Martin"
        assert event.user_role == "admin"
