"""
Templates HTML des emails transactionnels.

Chaque fonction retourne un couple (sujet, html). Les valeurs
interpolées sont échappées.
"""

from html import escape
from typing import Optional, Tuple

from formalis.models.enums import ROLE_LABELS, TICKET_STATUT_LABELS, TicketStatut, label_for, parse_enum


def base_layout(content: str, org_name: Optional[str] = None) -> str:
    """Gabarit commun (en-tête avec le nom de l'organisation, pied de page)."""
    name = escape(org_name or "Formalis")
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width,initial-scale=1"></head>
<body style="margin:0;padding:0;background:#0a0a0a;font-family:-apple-system,'Segoe UI',Roboto,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background:#0a0a0a;padding:32px 16px;">
    <tr><td align="center">
      <table width="600" cellpadding="0" cellspacing="0" style="background:#141414;border:1px solid #2a2a2a;border-radius:12px;">
        <tr><td style="background:#1a1a1a;padding:24px 32px;border-bottom:1px solid #2a2a2a;">
          <span style="color:#F97316;font-size:18px;font-weight:700;">{name}</span>
        </td></tr>
        <tr><td style="padding:32px;color:#fafafa;font-size:14px;line-height:1.6;">
          {content}
        </td></tr>
        <tr><td style="padding:20px 32px;border-top:1px solid #2a2a2a;color:#666;font-size:11px;text-align:center;">
          Envoyé par {name} via la plateforme Formalis
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""


def invitation_extranet(prenom: str, nom: str, role: str, org_name: str, lien: str) -> Tuple[str, str]:
    """Invitation à créer son mot de passe extranet."""
    role_label = ROLE_LABELS.get(role, role).lower()
    lien_html = escape(lien, quote=True)
    content = f"""<p style="margin:0 0 16px;">Bonjour <strong>{escape(prenom)} {escape(nom)}</strong>,</p>
    <p style="margin:0 0 16px;"><strong>{escape(org_name)}</strong> vous invite à accéder à votre espace {escape(role_label)} sur la plateforme.</p>
    <p style="margin:0 0 24px;">Cliquez sur le bouton ci-dessous pour créer votre mot de passe et accéder à votre espace :</p>
    <table cellpadding="0" cellspacing="0" style="margin:0 auto 24px;">
      <tr><td style="background:#F97316;border-radius:8px;padding:12px 32px;">
        <a href="{lien_html}" style="color:#fff;text-decoration:none;font-weight:600;">Accéder à mon espace</a>
      </td></tr>
    </table>
    <p style="margin:0;color:#a0a0a0;font-size:12px;">Ce lien est valable 24 heures. Si le bouton ne fonctionne pas, copiez ce lien :<br>
    <a href="{lien_html}" style="color:#F97316;word-break:break-all;">{lien_html}</a></p>"""
    return f"Invitation à votre espace {org_name}", base_layout(content, org_name)


def ticket_assigne(numero: str, titre: str, auteur_nom: str, description: Optional[str] = None) -> Tuple[str, str]:
    """Notification à l'utilisateur assigné à un ticket."""
    extrait = f"<p>{escape(description[:500])}</p>" if description else ""
    content = f"""<p>Un ticket vous a été assigné :</p>
    <p><strong>{escape(titre)}</strong></p>
    {extrait}
    <p>Par : {escape(auteur_nom)}</p>"""
    return f"[{numero}] Ticket assigné : {titre}", base_layout(content)


def ticket_statut_change(numero: str, titre: str, ancien: str, nouveau: str, auteur_nom: str) -> Tuple[str, str]:
    """Notification à l'auteur d'un ticket lors d'un changement de statut."""
    ancien_label = label_for(TICKET_STATUT_LABELS, parse_enum(TicketStatut, ancien))
    nouveau_label = label_for(TICKET_STATUT_LABELS, parse_enum(TicketStatut, nouveau))
    content = f"""<p>Le statut de votre ticket <strong>{escape(titre)}</strong> a été mis à jour :</p>
    <p>{escape(ancien_label or "")} → <strong>{escape(nouveau_label or "")}</strong></p>
    <p>Par : {escape(auteur_nom)}</p>"""
    return f"[{numero}] Statut mis à jour : {nouveau_label}", base_layout(content)
