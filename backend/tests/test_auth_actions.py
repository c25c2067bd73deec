"""
Event Gateway: Signup and Login Action Tests
=============================================

What:  SignupAction and LoginAction against the in-memory FakeIdentityStore.

What we test:
    ✅ Signup stores a bcrypt hash, never the plaintext
    ✅ Duplicate email rejected by the store surfaces as DuplicateUserError
    ✅ Login success returns id, role and a token for that subject
    ✅ Unknown email and wrong password raise the same error
    ✅ Missing role falls back to the configured default
"""

import pytest

from gateway.actions.auth import LoginAction, SignupAction
from gateway.exceptions import DuplicateUserError, InvalidCredentialsError
from gateway.schemas.actions import LoginInput, SignupInput
from gateway.security import TokenIssuer, verify_password


class TestSignupAction:

    @pytest.mark.asyncio
    async def test_stores_hash_not_plaintext(self, fake_store, test_settings):
        action = SignupAction(fake_store, test_settings)

        result = await action.execute(
            SignupInput(username="alice", email="alice@example.com", password="s3cret!")
        )

        stored = fake_store.users["alice@example.com"]["password"]
        assert result.id == fake_store.users["alice@example.com"]["id"]
        assert stored != "s3cret!"
        assert verify_password("s3cret!", stored)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, fake_store, test_settings):
        action = SignupAction(fake_store, test_settings)
        payload = SignupInput(username="alice", email="alice@example.com", password="pw")

        await action.execute(payload)
        with pytest.raises(DuplicateUserError):
            await action.execute(payload)


class TestLoginAction:

    def _action(self, fake_store, test_settings):
        return LoginAction(fake_store, TokenIssuer(test_settings), test_settings)

    @pytest.mark.asyncio
    async def test_success(self, fake_store, test_settings):
        user_id = fake_store.add_user("a@b.com", "x", role="organizer")
        action = self._action(fake_store, test_settings)

        result = await action.execute(LoginInput(email="a@b.com", password="x"))

        assert result.id == user_id
        assert result.role == "organizer"
        claims = TokenIssuer(test_settings).decode(result.token)
        assert claims["sub"] == str(user_id)
        assert claims[test_settings.jwt_claims_namespace]["x-hasura-default-role"] == "organizer"

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_are_indistinguishable(
        self, fake_store, test_settings
    ):
        fake_store.add_user("a@b.com", "x")
        action = self._action(fake_store, test_settings)

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await action.execute(LoginInput(email="a@b.com", password="y"))
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await action.execute(LoginInput(email="nobody@b.com", password="x"))

        assert wrong_password.value.message == unknown_email.value.message == "invalid credentials"
        assert wrong_password.value.status_code == unknown_email.value.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_role_uses_default(self, fake_store, test_settings):
        fake_store.add_user("a@b.com", "x", role=None)
        action = self._action(fake_store, test_settings)

        result = await action.execute(LoginInput(email="a@b.com", password="x"))

        assert result.role == test_settings.default_role
