"""
Event Gateway: Credential Primitives
=====================================

What:  Password hashing (bcrypt) and bearer token issuance (PyJWT, HS256).
Who:   Used by the signup and login actions.

Notes:
    - bcrypt embeds the salt and cost in the hash string, so verification
      needs nothing but the stored hash.
    - Tokens are stateless and verified by downstream services (the GraphQL
      engine reads the claims namespace). `decode()` exists for tooling and
      tests; the gateway itself never authenticates requests with it.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional, Union

import bcrypt
import jwt

from gateway.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# bcrypt only reads this many bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> bytes:
    # Same cost as real hashes, so an unknown email takes as long as a wrong password
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds))


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password with a fresh salt. The result never equals the input.

    Raises:
        ValueError: password longer than MAX_PASSWORD_BYTES once UTF-8 encoded
    """
    secret = password.encode("utf-8")
    if len(secret) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    hashed = bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: Optional[str], rounds: int = 12) -> bool:
    """
    Constant-time comparison of a plaintext password against a bcrypt hash.

    A missing or malformed stored hash yields False instead of raising, so a
    corrupt record looks exactly like a wrong password to the caller. A
    password over MAX_PASSWORD_BYTES can never have been stored, so it is
    False too, after the same amount of work.
    """
    secret = password.encode("utf-8")
    if not hashed or len(secret) > MAX_PASSWORD_BYTES:
        bcrypt.checkpw(secret[:MAX_PASSWORD_BYTES], _dummy_hash(rounds))
        return False
    try:
        return bcrypt.checkpw(secret, hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


class TokenIssuer:
    """
    Issues HS256 bearer tokens for authenticated users.

    Claims:
        sub, iat, exp, iss     standard claims
        name                   username, when the store returned one
        admin                  True when role == "admin"
        <claims namespace>     Hasura session claims: default role,
                               allowed roles, user id
    """

    ALGORITHM = "HS256"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    @property
    def _secret(self) -> str:
        return self.settings.jwt_secret.get_secret_value()

    def issue(
        self,
        user_id: Union[int, str],
        role: str,
        username: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(hours=self.settings.jwt_expiry_hours)
        subject = str(user_id)

        allowed_roles = [role] if role == "admin" else [role, "admin"]
        claims: Dict[str, Any] = {
            "sub": subject,
            "admin": role == "admin",
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "iss": self.settings.jwt_issuer,
            self.settings.jwt_claims_namespace: {
                "x-hasura-default-role": role,
                "x-hasura-allowed-roles": allowed_roles,
                "x-hasura-user-id": subject,
            },
        }
        if username:
            claims["name"] = username

        return jwt.encode(claims, self._secret, algorithm=self.ALGORITHM)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature, issuer and expiry and return the claims.

        Raises:
            jwt.InvalidTokenError (or a subclass) when verification fails.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self.ALGORITHM],
            issuer=self.settings.jwt_issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
