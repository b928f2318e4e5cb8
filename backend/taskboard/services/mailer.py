from __future__ import annotations

import smtplib
from email.message import EmailMessage

import structlog
from starlette.concurrency import run_in_threadpool

from taskboard.core.config import settings

log = structlog.get_logger(__name__)


def password_reset_link(token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/reset-password?token={token}"


def _send(msg: EmailMessage) -> None:
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as s:
        if settings.SMTP_TLS:
            s.starttls()
        if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
            s.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        s.send_message(msg)


async def send_password_reset_email(email: str, token: str) -> bool:
    """
    Returns True when the message was handed to SMTP. Without SMTP settings
    nothing is sent.
    """
    if not settings.SMTP_HOST or not settings.MAIL_FROM:
        log.info("password_reset_email_skipped", email=email, reason="smtp_not_configured")
        return False

    link = password_reset_link(token)

    msg = EmailMessage()
    msg["Subject"] = "Your account was approved: set your password"
    msg["From"] = settings.MAIL_FROM
    msg["To"] = email
    msg.set_content(
        "Your request to join was approved.\n\n"
        f"Set your password here: {link}\n\n"
        "If you did not request access you can ignore this email."
    )

    try:
        await run_in_threadpool(_send, msg)
    except (smtplib.SMTPException, OSError) as e:
        log.warning("password_reset_email_failed", email=email, error=str(e))
        return False

    log.info("password_reset_email_sent", email=email)
    return True
