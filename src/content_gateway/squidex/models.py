"""Value types shared by the Squidex authenticator, client and registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Content payloads are tenant-defined JSON objects.
ContentData = dict[str, Any]

SQUIDEX_SCOPE = "squidex-api"
DEFAULT_TOKEN_MARGIN_SECONDS = 300


@dataclass(frozen=True)
class TenantCredentials:
    """Client-credentials grant inputs for one Squidex app."""

    tenant_id: str
    client_id: str
    client_secret: str = field(repr=False)
    base_url: str

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/identity-server/connect/token"

    @property
    def content_url(self) -> str:
        return f"{self.base_url}/api/content/{self.tenant_id}"


@dataclass(frozen=True)
class BearerToken:
    """Access token with its margin-adjusted expiry (epoch seconds)."""

    value: str = field(repr=False)
    issued_scope: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at
