from formalis.services.email.send_email import EmailMessage, SendEmailResult, send_email
from formalis.services.email import templates

__all__ = [
    "EmailMessage",
    "SendEmailResult",
    "send_email",
    "templates",
]
