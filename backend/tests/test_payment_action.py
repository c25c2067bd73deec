"""
Event Gateway: Payment Action Tests
====================================

What:  PaymentAction and PaymentClient against a respx-mocked provider.

What we test:
    ✅ Provider payload carries amount, currency, defaults and the tx_ref
    ✅ Concurrent identical calls get distinct transaction references
    ✅ Provider failure → PaymentInitializationError, body never in message
    ✅ Rejected API key → CollaboratorRejectedError
    ✅ Missing API key → CollaboratorConfigError with no outbound request
"""

import asyncio
import json
from decimal import Decimal

import httpx
import pytest
import respx

from gateway.actions.payment import PaymentAction, generate_tx_ref
from gateway.clients.payment_client import PaymentClient
from gateway.config import Settings
from gateway.exceptions import (
    CollaboratorConfigError,
    CollaboratorRejectedError,
    PaymentInitializationError,
    UpstreamTimeoutError,
)
from gateway.schemas.actions import PaymentInput

INIT_URL = "https://chapa.test/v1/transaction/initialize"

SUCCESS = {
    "message": "Hosted Link",
    "status": "success",
    "data": {"checkout_url": "https://checkout.chapa.co/checkout/payment/abc123"},
}


@pytest.fixture
def action(test_settings):
    return PaymentAction(PaymentClient(test_settings), test_settings)


class TestPayload:

    def test_defaults_fill_missing_fields(self, action):
        payload = action.build_payload(PaymentInput(amount=Decimal("150.00")), "evt-1")

        assert payload["amount"] == "150.00"
        assert payload["currency"] == "ETB"
        assert payload["email"] == "payer@example.com"
        assert payload["tx_ref"] == "evt-1"
        assert payload["callback_url"] == "https://hooks.example.com/chapa"
        assert payload["meta[hide_receipt]"] == "true"
        # unset optional fields are dropped, not sent empty
        assert "phone_number" not in payload
        assert "first_name" not in payload

    def test_input_overrides_defaults(self, action):
        payment = PaymentInput.model_validate({
            "amount": "20",
            "currency": "usd",
            "phoneNumber": "0911121314",
            "email": "buyer@example.com",
            "first_name": "Abebe",
        })
        payload = action.build_payload(payment, "evt-2")

        assert payload["currency"] == "USD"
        assert payload["phone_number"] == "0911121314"
        assert payload["email"] == "buyer@example.com"
        assert payload["first_name"] == "Abebe"

    def test_amount_in_plain_notation(self, action):
        payment = PaymentInput.model_validate({"amount": "1e2"})
        assert action.build_payload(payment, "evt-3")["amount"] == "100"

    def test_tx_ref_prefix(self):
        assert generate_tx_ref("evt").startswith("evt-")
        assert generate_tx_ref("evt") != generate_tx_ref("evt")


class TestPaymentAction:

    @pytest.mark.asyncio
    async def test_success(self, action):
        with respx.mock() as router:
            route = router.post(INIT_URL).mock(return_value=httpx.Response(200, json=SUCCESS))
            result = await action.execute(PaymentInput(amount=Decimal("100")))

        assert result.checkout_url == SUCCESS["data"]["checkout_url"]
        assert result.message == "Hosted Link"
        assert result.tx_ref.startswith("evt-")

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer CHASECK_TEST-123"
        assert json.loads(request.content)["tx_ref"] == result.tx_ref

    @pytest.mark.asyncio
    async def test_concurrent_calls_get_distinct_references(self, action):
        with respx.mock() as router:
            route = router.post(INIT_URL).mock(return_value=httpx.Response(200, json=SUCCESS))
            results = await asyncio.gather(
                *(action.execute(PaymentInput(amount=Decimal("10"))) for _ in range(10))
            )

        refs = {r.tx_ref for r in results}
        assert len(refs) == 10
        sent = {json.loads(call.request.content)["tx_ref"] for call in route.calls}
        assert sent == refs

    @pytest.mark.asyncio
    async def test_provider_failure_hides_body(self, action):
        body = {"message": {"currency": ["The currency field is invalid."]}, "status": "failed"}
        with respx.mock() as router:
            router.post(INIT_URL).mock(return_value=httpx.Response(400, json=body))
            with pytest.raises(PaymentInitializationError) as exc_info:
                await action.execute(PaymentInput(amount=Decimal("10")))

        assert exc_info.value.message == "Error in payment initialization"
        assert "currency field" not in exc_info.value.message
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_success_without_checkout_url(self, action):
        body = {"message": "Hosted Link", "status": "success", "data": None}
        with respx.mock() as router:
            router.post(INIT_URL).mock(return_value=httpx.Response(200, json=body))
            with pytest.raises(PaymentInitializationError):
                await action.execute(PaymentInput(amount=Decimal("10")))

    @pytest.mark.asyncio
    async def test_rejected_api_key(self, action):
        with respx.mock() as router:
            router.post(INIT_URL).mock(
                return_value=httpx.Response(401, json={"message": "Invalid API Key"})
            )
            with pytest.raises(CollaboratorRejectedError):
                await action.execute(PaymentInput(amount=Decimal("10")))

    @pytest.mark.asyncio
    async def test_timeout_is_not_retried(self, action):
        with respx.mock() as router:
            route = router.post(INIT_URL).mock(side_effect=httpx.ReadTimeout("slow"))
            with pytest.raises(UpstreamTimeoutError):
                await action.execute(PaymentInput(amount=Decimal("10")))

        assert route.call_count == 1

    @pytest.mark.asyncio
    async def test_missing_api_key_makes_no_request(self):
        settings = Settings(_env_file=None, jwt_secret="x" * 40, chapa_base_url="https://chapa.test/v1")
        action = PaymentAction(PaymentClient(settings), settings)

        with respx.mock(assert_all_called=False) as router:
            route = router.post(INIT_URL).mock(return_value=httpx.Response(200, json=SUCCESS))
            with pytest.raises(CollaboratorConfigError):
                await action.execute(PaymentInput(amount=Decimal("10")))

        assert route.call_count == 0
