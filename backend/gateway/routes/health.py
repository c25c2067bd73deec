"""
Event Gateway: Health Check Route
==================================

What:  Liveness probe plus identity store reachability.
How:   Sends `query { __typename }` to the GraphQL endpoint. The vendor
       collaborators are not probed: each call to them costs money or
       creates state.

    Status levels:
    - healthy:   identity store reachable
    - degraded:  identity store unreachable (HTTP 200; logins/signups fail)
"""

import logging
import time

from fastapi import APIRouter, Depends

from gateway import __version__
from gateway.clients.graphql_client import IdentityStore
from gateway.dependencies import get_identity_store
from gateway.schemas.actions import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(store: IdentityStore = Depends(get_identity_store)) -> HealthResponse:
    reachable = await store.ping()
    if not reachable:
        logger.warning("Health check: identity store unreachable")

    return HealthResponse(
        status="healthy" if reachable else "degraded",
        version=__version__,
        identity_store="connected" if reachable else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
