"""
Event Gateway: Signup and Login Actions
========================================

What:  Credential actions backed by the identity store.
How:   bcrypt hashing/verification (in the thread pool, it is CPU bound) and
       HS256 token issuance. The store is the only place user rows live.

Signup flow:
    hash password → insert_users_one → {id}

Login flow:
    users(where email) → checkpw → issue token → {id, token, role}
    Unknown email and wrong password both raise InvalidCredentialsError, and
    both paths run one bcrypt comparison so timing does not tell them apart.
"""

import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool

from gateway.actions.base import Action
from gateway.clients.graphql_client import IdentityStore
from gateway.config import Settings, settings as default_settings
from gateway.exceptions import InvalidCredentialsError
from gateway.schemas.actions import LoginInput, LoginOutput, SignupInput, SignupOutput
from gateway.security import TokenIssuer, hash_password, verify_password

logger = logging.getLogger(__name__)


class SignupAction(Action[SignupInput, SignupOutput]):
    """
    Creates a user with a hashed password.

    No existence pre-check: the store's unique constraint rejects duplicates
    atomically and the client maps that to DuplicateUserError (400).
    """

    name = "signup"

    def __init__(self, store: IdentityStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or default_settings

    async def execute(self, payload: SignupInput) -> SignupOutput:
        password_hash = await run_in_threadpool(
            hash_password, payload.password, self.settings.bcrypt_rounds
        )
        user_id = await self.store.insert_user(
            username=payload.username,
            email=str(payload.email),
            password_hash=password_hash,
        )
        logger.info("User created: id=%s", user_id)
        return SignupOutput(id=user_id)


class LoginAction(Action[LoginInput, LoginOutput]):
    name = "login"

    def __init__(
        self,
        store: IdentityStore,
        token_issuer: TokenIssuer,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.token_issuer = token_issuer
        self.settings = settings or default_settings

    async def execute(self, payload: LoginInput) -> LoginOutput:
        user = await self.store.find_user_by_email(payload.email)

        stored_hash = user.password if user else None
        valid = await run_in_threadpool(
            verify_password, payload.password, stored_hash, self.settings.bcrypt_rounds
        )
        if user is None or not valid:
            # Same exception either way; the reason only goes to the log
            logger.info("Login rejected (%s)", "unknown email" if user is None else "bad password")
            raise InvalidCredentialsError()

        role = user.role or self.settings.default_role
        token = self.token_issuer.issue(user.id, role, username=user.username)
        logger.info("Login succeeded: id=%s role=%s", user.id, role)
        return LoginOutput(id=user.id, token=token, role=role)
