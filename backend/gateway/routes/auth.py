"""
Event Gateway: Credential Routes
=================================

What:  POST /signup and POST /login.
Who:   Called by the GraphQL engine as action handlers.

Request Flow:
    1. FastAPI validates the action envelope (400 on malformed body)
    2. The action runs its single identity store call
    3. Errors are formatted by the global exception handlers
"""

import logging

from fastapi import APIRouter, Depends

from gateway.actions.auth import LoginAction, SignupAction
from gateway.dependencies import get_login_action, get_signup_action
from gateway.schemas.actions import (
    ActionPayload,
    ErrorResponse,
    LoginInput,
    LoginOutput,
    SignupInput,
    SignupOutput,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    response_model=SignupOutput,
    responses={
        400: {"description": "Invalid input or rejected by identity store", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        502: {"description": "Identity store unavailable", "model": ErrorResponse},
    },
    summary="Register a user",
)
async def signup(
    payload: ActionPayload[SignupInput],
    action: SignupAction = Depends(get_signup_action),
) -> SignupOutput:
    """Hash the password and insert the user; returns the new id."""
    return await action.execute(payload.input)


@router.post(
    "/login",
    response_model=LoginOutput,
    responses={
        400: {"description": "Missing email or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        502: {"description": "Identity store unavailable", "model": ErrorResponse},
    },
    summary="Exchange email and password for a bearer token",
)
async def login(
    payload: ActionPayload[LoginInput],
    action: LoginAction = Depends(get_login_action),
) -> LoginOutput:
    """
    Verify credentials and issue a bearer token.

    Unknown email and wrong password produce the same
    `401 {"message": "invalid credentials"}`.
    """
    return await action.execute(payload.input)
