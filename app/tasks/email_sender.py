"""SMTP delivery for notification emails.

Messages go out as multipart/alternative (plain text plus optional HTML).
With no ``smtp_host`` configured nothing is sent and a warning is logged,
which is the normal state for local development and tests.
"""

import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.config import settings

logger = logging.getLogger(__name__)


def _build_message(to: str, subject: str, body: str, html: str | None) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["From"] = settings.smtp_from
    msg["To"] = to
    msg["Subject"] = subject
    msg.attach(MIMEText(body, "plain"))
    if html:
        msg.attach(MIMEText(html, "html"))
    return msg


def _send_email_sync(to: str, subject: str, body: str, html: str | None = None) -> None:
    if not settings.smtp_host:
        logger.warning("smtp_host is empty; not sending '%s' to %s", subject, to)
        return

    msg = _build_message(to, subject, body, html)
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
        server.ehlo()
        if settings.smtp_starttls:
            server.starttls()
        if settings.smtp_user:
            server.login(settings.smtp_user, settings.smtp_password)
        server.sendmail(settings.smtp_from, [to], msg.as_string())

    logger.info("Sent '%s' to %s", subject, to)


async def send_email(to: str, subject: str, body: str, html: str | None = None) -> None:
    """Send one email without blocking the event loop.

    Delivery errors are logged and swallowed: by the time a notification is
    sent the booking change it describes is already committed.
    """
    try:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _send_email_sync, to, subject, body, html)
    except Exception as exc:
        logger.error("Failed to send '%s' to %s: %s", subject, to, exc)
