"""
Event Gateway: Payment Provider Client (Chapa)
===============================================

What:  Initializes a hosted-checkout transaction with the payment provider.
How:   httpx POST of the initialization payload with a bearer API key.
Who:   PaymentAction.

The raw provider body is logged on failure but never placed in an exception
message, so it cannot reach the API response.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from gateway.config import Settings, settings as default_settings
from gateway.exceptions import (
    CollaboratorConfigError,
    CollaboratorRejectedError,
    PaymentInitializationError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

COLLABORATOR = "payment provider"


@dataclass
class CheckoutSession:
    message: str
    checkout_url: str


class PaymentClient:
    """Chapa `transaction/initialize` client."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or default_settings
        self._http_client = http_client

    @property
    def initialize_url(self) -> str:
        return f"{self.settings.chapa_base_url.rstrip('/')}/transaction/initialize"

    def ensure_configured(self) -> None:
        if not self.settings.payment_configured:
            raise CollaboratorConfigError(COLLABORATOR)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.chapa_api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self.initialize_url,
                json=payload,
                headers=self._headers(),
                timeout=self.settings.payment_timeout,
            )
        async with httpx.AsyncClient(timeout=self.settings.payment_timeout) as client:
            return await client.post(self.initialize_url, json=payload, headers=self._headers())

    async def initialize(self, payload: Dict[str, Any]) -> CheckoutSession:
        """
        Send the initialization payload and return the hosted checkout URL.

        Raises:
            CollaboratorConfigError: API key missing (checked before any I/O)
            CollaboratorRejectedError: provider answered 401/403
            UpstreamTimeoutError / UpstreamUnavailableError: transport failure
            PaymentInitializationError: any non-success answer
        """
        self.ensure_configured()
        tx_ref = payload.get("tx_ref")

        try:
            response = await self._post(payload)
        except httpx.TimeoutException as e:
            logger.error("Payment initialization timed out for tx_ref=%s: %s", tx_ref, str(e))
            raise UpstreamTimeoutError(COLLABORATOR, context={"tx_ref": tx_ref})
        except httpx.HTTPError as e:
            logger.error("Payment transport failure for tx_ref=%s: %s", tx_ref, str(e))
            raise UpstreamUnavailableError(
                COLLABORATOR, context={"tx_ref": tx_ref, "error": str(e)}
            )

        if response.status_code in (401, 403):
            logger.error(
                "Payment provider rejected API key (status %d): %s",
                response.status_code,
                response.text,
            )
            raise CollaboratorRejectedError(COLLABORATOR, context={"tx_ref": tx_ref})

        try:
            body = response.json()
        except ValueError:
            body = None

        if (
            not response.is_success
            or not isinstance(body, dict)
            or body.get("status") != "success"
        ):
            logger.error(
                "Payment initialization failed for tx_ref=%s (status %d): %s",
                tx_ref,
                response.status_code,
                response.text,
            )
            raise PaymentInitializationError(
                context={"tx_ref": tx_ref, "status": response.status_code}
            )

        checkout_url = (body.get("data") or {}).get("checkout_url")
        if not checkout_url:
            logger.error(
                "Payment provider returned success without checkout_url for tx_ref=%s: %s",
                tx_ref,
                response.text,
            )
            raise PaymentInitializationError(context={"tx_ref": tx_ref})

        return CheckoutSession(message=str(body.get("message") or ""), checkout_url=checkout_url)
