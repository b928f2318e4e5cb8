# tests/test_mailer.py
from __future__ import annotations

import pytest
import structlog
from structlog.testing import CapturingLogger

from taskboard.core.config import settings
from taskboard.services import mailer

TOKEN = "reset-token-do-not-leak"


@pytest.fixture()
def captured(monkeypatch) -> CapturingLogger:
    cap = CapturingLogger()
    monkeypatch.setattr(mailer, "log", structlog.wrap_logger(cap, processors=[], wrapper_class=structlog.BoundLogger))
    return cap


@pytest.mark.asyncio
async def test_skipped_reset_email_does_not_log_the_token(monkeypatch, captured):
    monkeypatch.setattr(settings, "SMTP_HOST", None)

    sent = await mailer.send_password_reset_email("jane@example.com", TOKEN)

    assert sent is False
    assert [(c.method_name, c.kwargs["event"], c.kwargs["email"]) for c in captured.calls] == [
        ("info", "password_reset_email_skipped", "jane@example.com"),
    ]
    assert TOKEN not in repr(captured.calls)


@pytest.mark.asyncio
async def test_reset_email_carries_the_link(monkeypatch, captured):
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "MAIL_FROM", "noreply@example.com")
    outbox = []
    monkeypatch.setattr(mailer, "_send", outbox.append)

    sent = await mailer.send_password_reset_email("jane@example.com", TOKEN)

    assert sent is True
    (msg,) = outbox
    assert msg["To"] == "jane@example.com"
    assert mailer.password_reset_link(TOKEN) in msg.get_content()
    assert TOKEN not in repr(captured.calls)
