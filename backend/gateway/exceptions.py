"""
Event Gateway: Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for every failure an action can hit.
How:   Each exception carries a client-safe message, an HTTP status code and an
       optional context dict. Global handlers (registered in main.py) turn
       them into `{"message": ...}` responses; context is logged server-side
       only.
Who:   Raised by collaborator clients and actions; caught by global handlers.

Exception Hierarchy:
    GatewayError (base)                      → 500
    ├── ValidationError                      → 400  malformed body, bad field
    ├── IdentityStoreError                   → 400  GraphQL errors[] relayed
    │   └── DuplicateUserError               → 400  uniqueness violation
    ├── InvalidCredentialsError              → 401  unknown email / bad password
    ├── CollaboratorConfigError              → 500  vendor credential missing
    ├── UpstreamError                        → 502
    │   ├── UpstreamUnavailableError         → 502  transport failure, non-2xx
    │   ├── UpstreamTimeoutError             → 504
    │   ├── CollaboratorRejectedError        → 403  vendor refused our key
    │   ├── ImageUploadError                 → 502
    │   └── PaymentInitializationError       → 502
    ├── EmailDeliveryError                   → 500
    └── RateLimitExceededError               → 429
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message:      Client-facing description (returned as `{"message": ...}`)
        context:      Debug info (logged but NOT returned to the client)
        status_code:  HTTP status the global handler responds with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GatewayError):
    """
    Raised when client input fails validation beyond the schema.

    When:    Undecodable base64, empty or oversize image, missing event field.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class IdentityStoreError(GatewayError):
    """
    The identity store answered with a GraphQL `errors[]` envelope.

    The first error message is relayed verbatim; it is the store's own
    business-rule rejection (constraint, permission, validation).
    """

    status_code = 400


class DuplicateUserError(IdentityStoreError):
    """Insert rejected by the store's uniqueness constraint on users."""

    def __init__(
        self,
        message: str = "user already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(GatewayError):
    """
    Login failed.

    The message is identical for "no such user" and "wrong password" so the
    response cannot be used to enumerate registered emails.
    """

    status_code = 401

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="invalid credentials", context=context)


class CollaboratorConfigError(GatewayError):
    """
    A collaborator's credentials are not configured.

    HTTP:    500. The client cannot fix this; the operator must set the key.
    """

    status_code = 500

    def __init__(self, collaborator: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["collaborator"] = collaborator
        super().__init__(message=f"{collaborator} is not configured", context=ctx)
        self.collaborator = collaborator


class UpstreamError(GatewayError):
    """Base for failures of an external collaborator."""

    status_code = 502


class UpstreamUnavailableError(UpstreamError):
    """Transport failure, non-2xx status, or an undecodable response body."""

    def __init__(
        self,
        collaborator: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["collaborator"] = collaborator
        super().__init__(message=f"{collaborator} is unavailable", context=ctx)
        self.collaborator = collaborator


class UpstreamTimeoutError(UpstreamError):
    """The collaborator did not answer within the configured timeout."""

    status_code = 504

    def __init__(
        self,
        collaborator: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["collaborator"] = collaborator
        super().__init__(message=f"{collaborator} timed out", context=ctx)
        self.collaborator = collaborator


class CollaboratorRejectedError(UpstreamError):
    """The collaborator rejected our credentials (401/403 from the vendor)."""

    status_code = 403

    def __init__(
        self,
        collaborator: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["collaborator"] = collaborator
        super().__init__(
            message=f"{collaborator} rejected the gateway credentials", context=ctx
        )
        self.collaborator = collaborator


class ImageUploadError(UpstreamError):
    """Object storage failed to accept an image."""

    def __init__(
        self,
        message: str = "Failed to upload image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentInitializationError(UpstreamError):
    """
    The payment provider did not return a successful initialization.

    The raw provider body goes into context (logged) and never into the
    response.
    """

    def __init__(
        self,
        message: str = "Error in payment initialization",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class EmailDeliveryError(GatewayError):
    """The mail relay refused or dropped the message. No retry is attempted."""

    status_code = 500

    def __init__(
        self,
        message: str = "Failed to send email",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(GatewayError):
    """
    Raised when a client exceeds the per-IP limit on credential endpoints.

    HTTP:    429 Too Many Requests, with a Retry-After header.
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
