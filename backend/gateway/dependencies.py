"""
Event Gateway: FastAPI Dependency Providers
============================================

What:  Builds actions and their collaborator clients for each request.
How:   Settings and the shared httpx client come from app.state (set in the
       lifespan); everything else is constructed from those two. Tests
       replace any provider through `app.dependency_overrides`.
"""

from typing import Optional

import httpx
from fastapi import Depends, Request

from gateway.actions.auth import LoginAction, SignupAction
from gateway.actions.images import UploadImageAction, UploadImagesAction
from gateway.actions.payment import PaymentAction
from gateway.actions.welcome import WelcomeEmailAction
from gateway.clients.graphql_client import GraphQLClient, IdentityStore
from gateway.clients.image_storage import ImageStorage
from gateway.clients.mail_client import MailClient
from gateway.clients.payment_client import PaymentClient
from gateway.config import Settings, settings as default_settings
from gateway.security import TokenIssuer


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or default_settings


def get_http_client(request: Request) -> Optional[httpx.AsyncClient]:
    # None outside the lifespan (e.g. ASGI tests); clients then open their own
    return getattr(request.app.state, "http_client", None)


def get_identity_store(
    settings: Settings = Depends(get_settings),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
) -> IdentityStore:
    return IdentityStore(GraphQLClient(settings, http_client))


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer(settings)


def get_image_storage(settings: Settings = Depends(get_settings)) -> ImageStorage:
    return ImageStorage(settings)


def get_payment_client(
    settings: Settings = Depends(get_settings),
    http_client: Optional[httpx.AsyncClient] = Depends(get_http_client),
) -> PaymentClient:
    return PaymentClient(settings, http_client)


def get_mail_client(settings: Settings = Depends(get_settings)) -> MailClient:
    return MailClient(settings)


# ── Actions ───────────────────────────────────────────────────────────────


def get_signup_action(
    store: IdentityStore = Depends(get_identity_store),
    settings: Settings = Depends(get_settings),
) -> SignupAction:
    return SignupAction(store, settings)


def get_login_action(
    store: IdentityStore = Depends(get_identity_store),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
) -> LoginAction:
    return LoginAction(store, token_issuer, settings)


def get_upload_images_action(
    storage: ImageStorage = Depends(get_image_storage),
    settings: Settings = Depends(get_settings),
) -> UploadImagesAction:
    return UploadImagesAction(storage, settings)


def get_upload_image_action(
    storage: ImageStorage = Depends(get_image_storage),
    settings: Settings = Depends(get_settings),
) -> UploadImageAction:
    return UploadImageAction(storage, settings)


def get_payment_action(
    client: PaymentClient = Depends(get_payment_client),
    settings: Settings = Depends(get_settings),
) -> PaymentAction:
    return PaymentAction(client, settings)


def get_welcome_email_action(
    mail: MailClient = Depends(get_mail_client),
    settings: Settings = Depends(get_settings),
) -> WelcomeEmailAction:
    return WelcomeEmailAction(mail, settings)
