"""
Event Gateway: Notification Route
==================================

What:  POST /welcome_email, the target of the users insert event trigger.
"""

from fastapi import APIRouter, Depends

from gateway.actions.welcome import WelcomeEmailAction
from gateway.dependencies import get_welcome_email_action
from gateway.schemas.actions import ErrorResponse, EventPayload, WelcomeEmailOutput

router = APIRouter(tags=["Notifications"])


@router.post(
    "/welcome_email",
    response_model=WelcomeEmailOutput,
    responses={
        400: {"description": "Event carries no valid email/username", "model": ErrorResponse},
        500: {"description": "Mail relay not configured or delivery failed", "model": ErrorResponse},
    },
    summary="Send the welcome email for a new user",
)
async def welcome_email(
    payload: EventPayload,
    action: WelcomeEmailAction = Depends(get_welcome_email_action),
) -> WelcomeEmailOutput:
    return await action.execute(payload)
