"""Request/response schemas for the API layer.

Field names are snake_case in Python and camelCase on the wire, matching
what the web and game clients already send.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Session ---


class LoginRequest(BaseModel):
    """Request body for ``POST /login``."""

    email: str | None = None
    password: str | None = None


class RefreshRequest(CamelModel):
    """Request body for ``POST /refresh``."""

    refresh_token: str | None = None


class IdTokenRequest(CamelModel):
    """Body carrying a Firebase ID token (``/logout``, ``/userinfo``, ...)."""

    id_token: str | None = None


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "All refresh tokens have been revoked"


class CustomTokenResponse(CamelModel):
    custom_token: str


# --- Firestore ---


class DocumentReadRequest(IdTokenRequest):
    """Request body for ``POST /fsread``.

    ``document`` is the path split into segments, e.g.
    ``["users", "u1", "saves", "slot1"]``.
    """

    document: list[str] | None = None


class WriteOptions(CamelModel):
    """Subset of Firestore ``set()`` options."""

    merge: bool = False
    merge_fields: list[str] | None = None


class DocumentWriteRequest(DocumentReadRequest):
    """Request body for ``POST /fswrite``."""

    data: dict[str, Any] | None = None
    options: WriteOptions | None = None


class DocumentReadResponse(BaseModel):
    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)


class SuccessResponse(BaseModel):
    success: bool


# --- Analytics ---


class SendEventRequest(IdTokenRequest):
    """Request body for ``POST /sendevent``."""

    client_id: str | None = Field(default=None, alias="client_id")
    event: str | None = None
    params: dict[str, Any] | None = None


# --- Squidex ---


class SquidexAppSummary(BaseModel):
    url: str


class SquidexConfigResponse(CamelModel):
    """Response for ``GET /squidex/content/config``. Never includes secrets."""

    default_url: str
    default_app: str
    available_apps: list[str]
    apps: dict[str, SquidexAppSummary]


# --- Status ---


class StatusResponse(BaseModel):
    status: str = "ok"
