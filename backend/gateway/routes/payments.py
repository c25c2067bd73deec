"""
Event Gateway: Payment Route
=============================

What:  POST /acceptPayment, returns a hosted checkout URL and the tx_ref the
       provider will report back on its callback.
"""

from fastapi import APIRouter, Depends

from gateway.actions.payment import PaymentAction
from gateway.dependencies import get_payment_action
from gateway.schemas.actions import ActionPayload, ErrorResponse, PaymentInput, PaymentOutput

router = APIRouter(tags=["Payments"])


@router.post(
    "/acceptPayment",
    response_model=PaymentOutput,
    responses={
        400: {"description": "Invalid amount or contact fields", "model": ErrorResponse},
        500: {"description": "Payment provider not configured", "model": ErrorResponse},
        502: {"description": "Payment provider refused the initialization", "model": ErrorResponse},
        504: {"description": "Payment provider timed out", "model": ErrorResponse},
    },
    summary="Initialize a payment",
)
async def accept_payment(
    payload: ActionPayload[PaymentInput],
    action: PaymentAction = Depends(get_payment_action),
) -> PaymentOutput:
    return await action.execute(payload.input)
