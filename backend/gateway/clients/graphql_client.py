"""
Event Gateway: Identity Store Client (GraphQL)
===============================================

What:  Sends hand-written GraphQL queries/mutations to the identity store and
       unwraps the `{data, errors[]}` envelope.
How:   httpx.AsyncClient POST of `{query, variables}` with the admin secret
       header. Every failure is translated into a GatewayError subclass here,
       so actions never see httpx exceptions.
Who:   IdentityStore (below) for users; the health route for reachability.

Error mapping:
    timeout                                   → UpstreamTimeoutError (504)
    connect/transport error, non-2xx, non-JSON → UpstreamUnavailableError (502)
    errors[] code access-denied               → CollaboratorRejectedError (403)
    errors[] uniqueness constraint violation  → DuplicateUserError (400)
    any other errors[]                        → IdentityStoreError (400), message relayed
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from gateway.config import Settings, settings as default_settings
from gateway.exceptions import (
    CollaboratorRejectedError,
    DuplicateUserError,
    IdentityStoreError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

COLLABORATOR = "identity store"


class GraphQLClient:
    """
    Thin GraphQL transport over httpx.

    Args:
        settings:     Source of endpoint URL, admin secret and timeout.
        http_client:  Shared AsyncClient (connection pool) created at app
                      startup. When None, a short-lived client is opened per
                      call.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or default_settings
        self._http_client = http_client

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        admin_secret = self.settings.hasura_admin_secret.get_secret_value()
        if admin_secret:
            headers["X-Hasura-Admin-Secret"] = admin_secret
        return headers

    async def _post(self, body: Dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self.settings.graphql_url,
                json=body,
                headers=self._headers(),
                timeout=self.settings.graphql_timeout,
            )
        async with httpx.AsyncClient(timeout=self.settings.graphql_timeout) as client:
            return await client.post(
                self.settings.graphql_url, json=body, headers=self._headers()
            )

    async def execute(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Run a query or mutation and return its `data` object.

        Raises:
            UpstreamTimeoutError, UpstreamUnavailableError,
            CollaboratorRejectedError, DuplicateUserError, IdentityStoreError
        """
        body = {"query": query, "variables": variables or {}}

        try:
            response = await self._post(body)
        except httpx.TimeoutException as e:
            logger.error("GraphQL request timed out: %s", str(e))
            raise UpstreamTimeoutError(COLLABORATOR, context={"error": str(e)})
        except httpx.HTTPError as e:
            logger.error("GraphQL transport failure: %s", str(e))
            raise UpstreamUnavailableError(COLLABORATOR, context={"error": str(e)})

        try:
            payload = response.json()
        except ValueError:
            logger.error(
                "GraphQL response was not JSON (status %d): %s",
                response.status_code,
                response.text[:500],
            )
            raise UpstreamUnavailableError(
                COLLABORATOR, context={"status": response.status_code}
            )

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            raise self._map_error(errors[0])

        if not response.is_success:
            logger.error(
                "GraphQL request failed with status %d: %s",
                response.status_code,
                response.text[:500],
            )
            raise UpstreamUnavailableError(
                COLLABORATOR, context={"status": response.status_code}
            )

        data = payload.get("data") if isinstance(payload, dict) else None
        if data is None:
            raise UpstreamUnavailableError(
                COLLABORATOR, context={"reason": "response carried no data"}
            )
        return data

    @staticmethod
    def _map_error(error: Dict[str, Any]) -> Exception:
        message = str(error.get("message") or "identity store rejected the request")
        code = (error.get("extensions") or {}).get("code", "")
        logger.warning("GraphQL error (code=%s): %s", code or "none", message)

        if code == "access-denied":
            return CollaboratorRejectedError(COLLABORATOR, context={"error": message})
        lowered = message.lower()
        if code == "constraint-violation" and ("uniqueness" in lowered or "unique" in lowered):
            return DuplicateUserError(context={"error": message})
        return IdentityStoreError(message=message, context={"code": code})


@dataclass
class UserRecord:
    """A row of the store's users table, as the gateway needs it."""

    id: Union[int, str]
    password: Optional[str]
    role: Optional[str] = None
    username: Optional[str] = None


INSERT_USER_MUTATION = """
mutation ($email: String!, $password: String!, $username: String!) {
  insert_users_one(object: {email: $email, password: $password, username: $username}) {
    id
  }
}
"""

FIND_USER_BY_EMAIL_QUERY = """
query ($email: String!) {
  users(where: {email: {_eq: $email}}, limit: 1) {
    id
    username
    password
    role
  }
}
"""

PING_QUERY = "query { __typename }"


class IdentityStore:
    """User reads/writes against the identity store."""

    def __init__(self, client: GraphQLClient):
        self.client = client

    async def insert_user(self, username: str, email: str, password_hash: str) -> Union[int, str]:
        """
        Insert a user and return its id.

        Duplicates are rejected atomically by the store's unique constraint
        and surface as DuplicateUserError.
        """
        data = await self.client.execute(
            INSERT_USER_MUTATION,
            {"email": email, "password": password_hash, "username": username},
        )
        inserted = data.get("insert_users_one")
        if not inserted or inserted.get("id") is None:
            raise IdentityStoreError(
                message="user could not be created",
                context={"data": data},
            )
        return inserted["id"]

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        data = await self.client.execute(FIND_USER_BY_EMAIL_QUERY, {"email": email})
        users = data.get("users") or []
        if not users:
            return None
        row = users[0]
        return UserRecord(
            id=row["id"],
            password=row.get("password"),
            role=row.get("role"),
            username=row.get("username"),
        )

    async def ping(self) -> bool:
        """True when the store answers a trivial query; never raises."""
        try:
            await self.client.execute(PING_QUERY)
            return True
        except Exception as e:
            logger.warning("Identity store health check failed: %s", str(e))
            return False
