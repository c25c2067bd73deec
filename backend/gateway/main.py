"""
Event Gateway: FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn gateway.main:app`) or the `event-gateway` script.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌────────────┐ ┌──────┐  │
    │  │  Req ID  │→│ Logging  │→│ Rate Limit │→│ CORS │  │
    │  └──────────┘ └──────────┘ └────────────┘ └──────┘  │
    │                                                     │
    │  Routes:                                            │
    │  /signup /login /uploadImages /image_upload         │
    │  /acceptPayment /welcome_email /health              │
    │                                                     │
    │  Exception Handlers:                                │
    │  GatewayError→status_code │ validation→400 │ *→500  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate mandatory configuration (startup aborts on failure)
    3. Open the shared httpx client (identity store + payment provider)

    Shutdown:
    1. Close the shared httpx client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gateway import __version__
from gateway.config import Settings, settings as default_settings
from gateway.exceptions import GatewayError
from gateway.middleware.logging import RequestLoggingMiddleware
from gateway.middleware.rate_limit import RateLimitMiddleware
from gateway.middleware.request_id import RequestIDMiddleware, request_id_var
from gateway.routes import auth, health, images, notifications, payments

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """Configure the root logger once, before anything else logs."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    setup_logging(settings.log_level)
    logger.info("Event Gateway %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.critical("Configuration error: %s", str(e))
        raise

    for collaborator, ready in (
        ("image storage", settings.cloudinary_configured),
        ("payment provider", settings.payment_configured),
        ("mail relay", settings.smtp_configured),
    ):
        if not ready:
            logger.warning("%s is not configured; its action will answer 500", collaborator)

    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.graphql_timeout),
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
    logger.info("Identity store: %s", settings.graphql_url)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Event Gateway shutting down...")
    await app.state.http_client.aclose()
    app.state.http_client = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid payload"
    first = errors[0]
    if first.get("type") in ("json_invalid", "model_attributes_type", "dict_type"):
        return "invalid payload"
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{loc}: {message}" if loc else message


def _request_id(request: Request) -> str:
    # request.state outlives the context var, which is reset before the
    # catch-all handler runs in ServerErrorMiddleware
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Every failure leaves the gateway as `{"message": ...}`.

    Handler hierarchy:
        GatewayError            → exc.status_code
        RequestValidationError  → 400 (malformed JSON, missing/empty field)
        Exception (fallback)    → 500, stack trace logged only

    Rate limiting answers 429 from its middleware, outside these handlers.
    """

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError):
        rid = _request_id(request)
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "[%s] %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        message = _format_validation_error(exc)
        logger.warning("[%s] Invalid request to %s: %s", rid, request.url.path, message)
        return JSONResponse(status_code=400, content={"message": message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": "internal server error"})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: Configuration for this app instance; defaults to the
                  process-wide singleton. Stored on app.state and handed to
                  every client and action through the dependency providers.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Event Gateway",
        description=(
            "Action gateway for the event management backend: signup, login, "
            "image upload, payment initialization and welcome emails."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.http_client = None

    # Middleware executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(RateLimitMiddleware, settings=settings)
    app.add_middleware(RequestLoggingMiddleware, settings=settings)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(images.router)
    app.include_router(payments.router)
    app.include_router(notifications.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    uvicorn.run(
        "gateway.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )
