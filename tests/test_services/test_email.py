"""
Tests de l'envoi d'emails (Resend simulé) et de leur journal.
"""

import asyncio
import json

import httpx
import pytest
from sqlalchemy import select

from formalis.core.config import settings
from formalis.models import EmailEnvoye
from formalis.services.email import EmailMessage, send_email, templates


def make_message(organisation, **overrides) -> EmailMessage:
    values = dict(
        organisation_id=organisation.id,
        to="jeanne.dupont@example.fr",
        to_name="Jeanne Dupont",
        subject="Invitation",
        html="<p>Bonjour</p>",
        template="invitation_extranet",
    )
    values.update(overrides)
    return EmailMessage(**values)


def logged_emails(db_session):
    return db_session.execute(select(EmailEnvoye)).scalars().all()


class TestWithoutResend:

    def test_logged_as_error(self, db_session, organisation):
        result = asyncio.run(send_email(db_session, make_message(organisation)))

        assert result.success is False
        assert "RESEND_API_KEY" in result.error

        [email] = logged_emails(db_session)
        assert email.statut == "erreur"
        assert email.destinataire_email == "jeanne.dupont@example.fr"
        assert email.template == "invitation_extranet"


class TestWithResend:

    @pytest.fixture(autouse=True)
    def resend_key(self, monkeypatch):
        monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")

    def test_sent(self, db_session, organisation):
        sent = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(200, json={"id": "resend-123"})

        message = make_message(organisation, to=["a@example.fr", "b@example.fr"], cc=["c@example.fr"])
        result = asyncio.run(send_email(db_session, message, transport=httpx.MockTransport(handler)))

        assert result.success is True
        assert result.provider_id == "resend-123"

        [request] = sent
        assert request.headers["Authorization"] == "Bearer re_test"
        payload = json.loads(request.content)
        assert payload["to"] == ["a@example.fr", "b@example.fr"]
        assert payload["cc"] == ["c@example.fr"]

        [email] = logged_emails(db_session)
        assert email.statut == "envoye"
        assert email.destinataire_email == "a@example.fr"
        assert email.email_metadata["all_recipients"] == ["a@example.fr", "b@example.fr"]

    def test_provider_error_does_not_raise(self, db_session, organisation):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"message": "erreur"}))
        result = asyncio.run(send_email(db_session, make_message(organisation), transport=transport))

        assert result.success is False
        [email] = logged_emails(db_session)
        assert email.statut == "erreur"
        assert email.erreur


class TestTemplates:

    def test_invitation_escapes_values(self):
        subject, html = templates.invitation_extranet(
            "<Jeanne>", "Dupont", "formateur", "CF Test", "http://api.test/auth/extranet-invite?token=abc"
        )

        assert subject == "Invitation à votre espace CF Test"
        assert "&lt;Jeanne&gt;" in html
        assert "espace formateur" in html
        assert "token=abc" in html

    def test_status_change_labels(self):
        subject, html = templates.ticket_statut_change("TIC-0001", "Bug", "ouvert", "resolu", "Alice Martin")

        assert subject == "[TIC-0001] Statut mis à jour : Résolu"
        assert "Ouvert" in html
