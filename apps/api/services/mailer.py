"""SMTP delivery for transactional mail."""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, text_body: str, html_body: Optional[str] = None) -> bool:
    """Send one message. Returns False when SMTP is not configured or delivery fails."""
    if not settings.SMTP_HOST:
        logger.warning("SMTP is not configured; dropping mail '%s' to %s", subject, to_email)
        return False

    msg = EmailMessage()
    msg["From"] = f"{settings.APP_NAME} <{settings.SMTP_FROM}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.ehlo()
            if settings.SMTP_STARTTLS:
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Mail delivery to %s failed: %s", to_email, exc)
        return False
