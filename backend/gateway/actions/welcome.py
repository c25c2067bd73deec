"""
Event Gateway: Welcome Notification Action
===========================================

What:  Sends a fixed-template welcome email when a user row is inserted.
Who:   Invoked by the identity store's insert event trigger.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from gateway.actions.base import Action
from gateway.clients.mail_client import MailClient
from gateway.config import Settings, settings as default_settings
from gateway.schemas.actions import EventPayload, WelcomeEmailOutput

logger = logging.getLogger(__name__)

WELCOME_TEMPLATE = (
    "Hello {username},\n"
    "\n"
    "Thank you for joining our event management community! We're excited to have "
    "you on board and look forward to helping you create and manage your events "
    "with ease.\n"
    "If you have any questions or need assistance getting started, feel free to "
    "reach out. We're here to help!\n"
    "\n"
    "Best regards,\n"
    "{signature}"
)


def render_welcome(username: str, signature: str) -> str:
    return WELCOME_TEMPLATE.format(username=username, signature=signature)


class WelcomeEmailAction(Action[EventPayload, WelcomeEmailOutput]):
    name = "welcome_email"

    def __init__(self, mail: MailClient, settings: Optional[Settings] = None):
        self.mail = mail
        self.settings = settings or default_settings

    async def execute(self, payload: EventPayload) -> WelcomeEmailOutput:
        record = payload.event.data.new
        email = str(record.email)

        logger.info("Sending welcome email to %s", email)
        await self.mail.send(
            to=email,
            subject=self.settings.welcome_subject,
            body=render_welcome(record.username, self.settings.app_display_name),
        )

        return WelcomeEmailOutput(
            message=f"Welcome email sent successfully to {email}",
            sent_at=datetime.now(timezone.utc),
        )
