"""
Envoi d'emails via l'API Resend, avec journal dans emails_envoyes.

Canal best-effort : send_email() ne lève jamais. Sans RESEND_API_KEY,
l'email est quand même journalisé avec le statut "erreur".
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formalis.core.config import settings
from formalis.models.communication.email_envoye import EmailEnvoye
from formalis.models.enums import EmailStatut

logger = logging.getLogger(__name__)

RESEND_NOT_CONFIGURED = "Resend non configuré (RESEND_API_KEY manquant)"


@dataclass
class EmailMessage:
    """Email à envoyer, avec ses informations de traçabilité."""
    organisation_id: UUID
    to: Union[str, List[str]]
    subject: str
    html: str
    to_name: Optional[str] = None
    from_address: Optional[str] = None
    reply_to: Optional[str] = None
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)
    # Traçabilité
    entite_type: Optional[str] = None
    entite_id: Optional[UUID] = None
    template: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def recipients(self) -> List[str]:
        return self.to if isinstance(self.to, list) else [self.to]


@dataclass
class SendEmailResult:
    success: bool
    provider_id: Optional[str] = None
    error: Optional[str] = None


async def _post_to_resend(message: EmailMessage, transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    """
    Appelle l'API Resend.

    Returns:
        Identifiant Resend de l'email

    Raises:
        httpx.HTTPError: Erreur réseau ou statut >= 400
    """
    payload: Dict[str, Any] = {
        "from": message.from_address or settings.RESEND_FROM_EMAIL,
        "to": message.recipients,
        "subject": message.subject,
        "html": message.html,
    }
    if message.reply_to:
        payload["reply_to"] = message.reply_to
    if message.cc:
        payload["cc"] = message.cc
    if message.bcc:
        payload["bcc"] = message.bcc

    async with httpx.AsyncClient(timeout=15.0, transport=transport) as client:
        response = await client.post(
            settings.RESEND_API_URL,
            json=payload,
            headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
        )
        response.raise_for_status()
        return response.json().get("id", "")


def _log_email(db: Session, message: EmailMessage, result: SendEmailResult) -> None:
    """Journalise la tentative dans emails_envoyes (ne lève pas)."""
    metadata = dict(message.metadata)
    if len(message.recipients) > 1:
        metadata["all_recipients"] = message.recipients
    if message.cc:
        metadata["cc"] = message.cc
    if message.bcc:
        metadata["bcc"] = message.bcc

    try:
        db.add(EmailEnvoye(
            organisation_id=message.organisation_id,
            destinataire_email=message.recipients[0],
            destinataire_nom=message.to_name,
            sujet=message.subject,
            contenu_html=message.html,
            statut=(EmailStatut.ENVOYE if result.success else EmailStatut.ERREUR).value,
            provider_id=result.provider_id,
            entite_type=message.entite_type,
            entite_id=message.entite_id,
            template=message.template,
            erreur=result.error,
            email_metadata=metadata or None,
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[email] Journalisation impossible pour '{message.subject}': {e}")


async def send_email(
        db: Session,
        message: EmailMessage,
        transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SendEmailResult:
    """
    Envoie un email et le journalise.

    Args:
        db: Session élevée (journal emails_envoyes)
        message: Email à envoyer
        transport: Transport httpx (injection pour les tests)

    Returns:
        SendEmailResult (success=False si Resend absent ou en erreur)
    """
    if not settings.email_configured:
        result = SendEmailResult(success=False, error=RESEND_NOT_CONFIGURED)
    else:
        try:
            provider_id = await _post_to_resend(message, transport)
            result = SendEmailResult(success=True, provider_id=provider_id)
        except httpx.HTTPError as e:
            logger.warning(f"[email] Échec d'envoi '{message.subject}': {e}")
            result = SendEmailResult(success=False, error=str(e))

    _log_email(db, message, result)
    return result
