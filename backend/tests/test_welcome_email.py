"""
Event Gateway: Welcome Email Tests
===================================

What:  Template rendering, MailClient over a patched aiosmtplib.SMTP, and
       the WelcomeEmailAction that ties them together.

What we test:
    ✅ Template greets the username and signs with the display name
    ✅ Message goes out with STARTTLS, login and the configured subject
    ✅ Auth failure, connection failure, refused recipient → EmailDeliveryError
    ✅ Missing SMTP credentials → CollaboratorConfigError, no connection
"""

from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import pytest

from gateway.actions.welcome import WelcomeEmailAction, render_welcome
from gateway.clients.mail_client import MailClient
from gateway.config import Settings
from gateway.exceptions import CollaboratorConfigError, EmailDeliveryError
from gateway.schemas.actions import EventPayload

SMTP_PATH = "gateway.clients.mail_client.aiosmtplib.SMTP"


def _event(email="new@example.com", username="newbie"):
    return EventPayload.model_validate({
        "id": "85558393-c75d-4d2f-9c15-e80591b83894",
        "created_at": "2024-05-01T10:00:00.000Z",
        "trigger": {"name": "user_created"},
        "table": {"schema": "public", "name": "users"},
        "event": {
            "op": "INSERT",
            "data": {"old": None, "new": {"id": 9, "email": email, "username": username}},
        },
    })


def _mock_smtp(send_result=({}, "250 OK")):
    smtp = AsyncMock()
    smtp.send_message.return_value = send_result
    smtp_cls = MagicMock()
    smtp_cls.return_value.__aenter__ = AsyncMock(return_value=smtp)
    smtp_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return smtp_cls, smtp


def test_render_welcome():
    body = render_welcome("newbie", "The Event Management Team")
    assert body.startswith("Hello newbie,")
    assert body.endswith("Best regards,\nThe Event Management Team")


class TestMailClient:

    @pytest.mark.asyncio
    async def test_send(self, test_settings):
        smtp_cls, smtp = _mock_smtp()
        with patch(SMTP_PATH, smtp_cls):
            await MailClient(test_settings).send("to@example.com", "Hi", "Body")

        _, kwargs = smtp_cls.call_args
        assert kwargs["hostname"] == "smtp.gmail.com"
        assert kwargs["port"] == 587
        assert kwargs["start_tls"] is True
        smtp.login.assert_awaited_once_with("mailer@example.com", "app-password")

        msg = smtp.send_message.await_args.args[0]
        assert msg["To"] == "to@example.com"
        assert msg["From"] == "mailer@example.com"
        assert msg["Subject"] == "Hi"

    @pytest.mark.asyncio
    async def test_auth_failure(self, test_settings):
        smtp_cls, smtp = _mock_smtp()
        smtp.login.side_effect = aiosmtplib.SMTPAuthenticationError(535, "bad credentials")
        with patch(SMTP_PATH, smtp_cls):
            with pytest.raises(EmailDeliveryError) as exc_info:
                await MailClient(test_settings).send("to@example.com", "Hi", "Body")

        assert exc_info.value.message == "Failed to send email"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_connection_failure(self, test_settings):
        smtp_cls = MagicMock()
        smtp_cls.return_value.__aenter__ = AsyncMock(
            side_effect=aiosmtplib.SMTPConnectError("connection refused")
        )
        smtp_cls.return_value.__aexit__ = AsyncMock(return_value=False)
        with patch(SMTP_PATH, smtp_cls):
            with pytest.raises(EmailDeliveryError):
                await MailClient(test_settings).send("to@example.com", "Hi", "Body")

    @pytest.mark.asyncio
    async def test_refused_recipient(self, test_settings):
        refused = ({"to@example.com": aiosmtplib.SMTPResponse(550, "mailbox unavailable")}, "OK")
        smtp_cls, _ = _mock_smtp(send_result=refused)
        with patch(SMTP_PATH, smtp_cls):
            with pytest.raises(EmailDeliveryError):
                await MailClient(test_settings).send("to@example.com", "Hi", "Body")

    @pytest.mark.asyncio
    async def test_not_configured(self):
        settings = Settings(_env_file=None, jwt_secret="x" * 40)
        smtp_cls, _ = _mock_smtp()
        with patch(SMTP_PATH, smtp_cls):
            with pytest.raises(CollaboratorConfigError):
                await MailClient(settings).send("to@example.com", "Hi", "Body")
        smtp_cls.assert_not_called()


class TestWelcomeEmailAction:

    @pytest.mark.asyncio
    async def test_sends_template_to_new_user(self, test_settings):
        mail = MailClient(test_settings)
        mail.send = AsyncMock()
        action = WelcomeEmailAction(mail, test_settings)

        result = await action.execute(_event())

        assert result.message == "Welcome email sent successfully to new@example.com"
        assert result.sent_at.tzinfo is not None
        kwargs = mail.send.await_args.kwargs
        assert kwargs["to"] == "new@example.com"
        assert kwargs["subject"] == "Welcome to Event Management"
        assert kwargs["body"].startswith("Hello newbie,")

    @pytest.mark.asyncio
    async def test_delivery_failure_propagates(self, test_settings):
        mail = MailClient(test_settings)
        mail.send = AsyncMock(side_effect=EmailDeliveryError())
        action = WelcomeEmailAction(mail, test_settings)

        with pytest.raises(EmailDeliveryError):
            await action.execute(_event())
