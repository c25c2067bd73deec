"""
Event Gateway: Mail Relay Client (SMTP)
========================================

What:  Sends a single plaintext message through an authenticated SMTP relay.
How:   aiosmtplib connection per message: connect, STARTTLS, login, send.
Who:   WelcomeEmailAction.

There is no queue and no retry: a relay failure is terminal for the request
and surfaces as EmailDeliveryError.
"""

import logging
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from gateway.config import Settings, settings as default_settings
from gateway.exceptions import CollaboratorConfigError, EmailDeliveryError

logger = logging.getLogger(__name__)

COLLABORATOR = "mail relay"


class MailClient:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def ensure_configured(self) -> None:
        if not self.settings.smtp_configured:
            raise CollaboratorConfigError(COLLABORATOR)

    def build_message(self, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.settings.smtp_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body, charset="utf-8")
        return msg

    async def send(self, to: str, subject: str, body: str) -> None:
        """
        Deliver one message.

        Raises:
            CollaboratorConfigError: SMTP credentials or sender missing
            EmailDeliveryError: connect, auth or send failed
        """
        self.ensure_configured()
        msg = self.build_message(to, subject, body)

        try:
            async with aiosmtplib.SMTP(
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                start_tls=self.settings.smtp_use_tls,
                timeout=self.settings.smtp_timeout,
            ) as smtp:
                await smtp.login(
                    self.settings.smtp_username,
                    self.settings.smtp_password.get_secret_value(),
                )
                errors, response = await smtp.send_message(msg)
        except aiosmtplib.SMTPAuthenticationError as e:
            logger.error("SMTP authentication failed for %s: %s", self.settings.smtp_username, e)
            raise EmailDeliveryError(context={"to": to, "error": "authentication failed"})
        except aiosmtplib.SMTPException as e:
            logger.error("SMTP send to %s failed: %s", to, e)
            raise EmailDeliveryError(context={"to": to, "error": str(e)})
        except OSError as e:
            logger.error("SMTP connection to %s failed: %s", self.settings.smtp_host, e)
            raise EmailDeliveryError(context={"to": to, "error": str(e)})

        if errors:
            details = "; ".join(f"{addr}: {err}" for addr, err in errors.items())
            logger.error("SMTP relay refused recipients: %s", details)
            raise EmailDeliveryError(context={"to": to, "refused": details})

        logger.info("Email '%s' relayed to %s: %s", subject, to, response)
