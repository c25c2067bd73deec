"""
Event Gateway: Payment Initiation Action
=========================================

What:  Starts a hosted-checkout payment and returns the checkout URL.
How:   Generates a fresh transaction reference, assembles the provider
       payload from the input plus configured defaults, makes one provider
       call. Never retried: a repeated call would create a second
       transaction.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from gateway.actions.base import Action
from gateway.clients.payment_client import PaymentClient
from gateway.config import Settings, settings as default_settings
from gateway.schemas.actions import PaymentInput, PaymentOutput

logger = logging.getLogger(__name__)


def generate_tx_ref(prefix: str) -> str:
    """Unique per call, random (uuid4) so identical inputs never collide."""
    return f"{prefix}-{uuid.uuid4()}"


class PaymentAction(Action[PaymentInput, PaymentOutput]):
    name = "accept_payment"

    def __init__(self, client: PaymentClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or default_settings

    def build_payload(self, payment: PaymentInput, tx_ref: str) -> Dict[str, Any]:
        s = self.settings
        payload = {
            "amount": format(payment.amount, "f"),
            "currency": (payment.currency or s.payment_currency).upper(),
            "email": str(payment.email) if payment.email else s.payment_default_email,
            "first_name": payment.first_name or s.payment_default_first_name,
            "last_name": payment.last_name or s.payment_default_last_name,
            "phone_number": payment.phone_number or "",
            "tx_ref": tx_ref,
            "callback_url": s.payment_callback_url,
            "return_url": s.payment_return_url,
            "customization[title]": s.payment_title,
            "customization[description]": s.payment_description,
            "meta[hide_receipt]": "true",
        }
        # Provider rejects empty strings for optional fields
        return {k: v for k, v in payload.items() if v != ""}

    async def execute(self, payload: PaymentInput) -> PaymentOutput:
        self.client.ensure_configured()

        tx_ref = generate_tx_ref(self.settings.payment_tx_prefix)
        logger.info(
            "Initializing payment tx_ref=%s amount=%s currency=%s",
            tx_ref,
            payload.amount,
            payload.currency or self.settings.payment_currency,
        )

        session = await self.client.initialize(self.build_payload(payload, tx_ref))
        return PaymentOutput(
            message=session.message,
            tx_ref=tx_ref,
            checkout_url=session.checkout_url,
        )
