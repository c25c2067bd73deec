"""
Event Gateway: Pydantic Request/Response Schemas
=================================================

What:  The API contract of every action: inbound envelopes, typed inputs and
       the response bodies.
How:   FastAPI validates request bodies against these models before the
       route runs; a failure becomes a 400 `{"message": ...}` response.
Who:   Routes (as body and response models) and actions (as input/output).

Envelopes:
    Actions arrive as `{"action": {"name": ...}, "input": {...},
    "session_variables": {...}}` (Hasura action format); only `input` is
    required. The welcome email arrives as an event trigger payload
    `{"event": {"data": {"new": {...}}}}`.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from gateway.security import MAX_PASSWORD_BYTES

InputT = TypeVar("InputT", bound=BaseModel)

UserId = Union[int, str]


# ══════════════════════════════════════════════════════════════════════════
# Envelopes
# ══════════════════════════════════════════════════════════════════════════


class ActionInfo(BaseModel):
    name: Optional[str] = None


class ActionPayload(BaseModel, Generic[InputT]):
    """Hasura-style action envelope around a typed input."""

    model_config = ConfigDict(extra="ignore")

    action: Optional[ActionInfo] = None
    input: InputT
    session_variables: Dict[str, Any] = Field(default_factory=dict)
    request_query: Optional[str] = None


class NewUserRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: EmailStr
    username: str = Field(min_length=1)


class EventData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    old: Optional[Dict[str, Any]] = None
    new: NewUserRecord


class EventBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    op: Optional[str] = None
    data: EventData


class TriggerInfo(BaseModel):
    name: Optional[str] = None


class EventPayload(BaseModel):
    """
    Event trigger envelope carrying a newly inserted user row.

    Only `event.data.new.{email,username}` is read; the rest of Hasura's
    payload (table, trigger, delivery info) is accepted and ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    created_at: Optional[str] = None
    trigger: Optional[TriggerInfo] = None
    event: EventBody


# ══════════════════════════════════════════════════════════════════════════
# Inputs
# ══════════════════════════════════════════════════════════════════════════


class SignupInput(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # max_length counts characters; bcrypt counts UTF-8 bytes
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginInput(BaseModel):
    # Plain str on purpose: a malformed address must get the same 401 as an
    # unknown one, not a 400.
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UploadImagesInput(BaseModel):
    base64_strs: List[str] = Field(min_length=1, description="Base64 images, data-URI prefix allowed")


class ImageUploadInput(BaseModel):
    file: str = Field(min_length=1, description="Base64 image, data-URI prefix allowed")
    user_id: UserId


class PaymentInput(BaseModel):
    """
    Payment request. Only the amount is required; contact fields fall back to
    the configured defaults.
    """

    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal = Field(gt=0)
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Outputs
# ══════════════════════════════════════════════════════════════════════════


class SignupOutput(BaseModel):
    id: UserId


class LoginOutput(BaseModel):
    id: UserId
    token: str
    role: str


class UploadImagesOutput(BaseModel):
    urls: List[str]


class ImageUploadOutput(BaseModel):
    url: str


class PaymentOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    tx_ref: str
    checkout_url: str = Field(alias="checkoutUrl")


class WelcomeEmailOutput(BaseModel):
    message: str
    sent_at: datetime


# ══════════════════════════════════════════════════════════════════════════
# Error & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or degraded")
    version: str
    identity_store: str = Field(description="connected or disconnected")
    uptime_seconds: float
