"""Domain-specific exceptions for content-gateway.

Every error carries the fields of the uniform error envelope
(``code``, ``name``, ``message``, ``details``). The HTTP status for each
type is decided in ``content_gateway.api.errors``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class GatewayError(Exception):
    """Base class for errors rendered as ``{success: false, ...}``."""

    default_code = "internal-error"
    error_name = "ServerError"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details
        super().__init__(message)


class ValidationError(GatewayError):
    """Malformed inbound request (missing schema, id, body, ...)."""

    default_code = "invalid-request"
    error_name = "ValidationError"


class AuthenticationError(GatewayError):
    """Credentials or tokens were rejected, or the identity endpoint failed."""

    default_code = "authentication-failed"
    error_name = "AuthError"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status: int | None = None,
        details: Any = None,
    ) -> None:
        self.status = status
        super().__init__(message, code=code, details=details)


class ConfigurationError(GatewayError):
    """A setting required by the requested operation is missing."""

    default_code = "missing-configuration"
    error_name = "ConfigError"


class UnknownTenantError(GatewayError):
    """Tenant (Squidex app) id has no configured credentials."""

    default_code = "unknown-app"
    error_name = "UnknownTenantError"

    def __init__(self, tenant_id: str, available: Iterable[str]) -> None:
        self.tenant_id = tenant_id
        self.available = list(available)
        super().__init__(
            f'App "{tenant_id}" not found in configuration. '
            f"Available apps: {', '.join(self.available)}",
            details={"availableApps": self.available},
        )


class TransportError(GatewayError):
    """Outbound call failed before a response arrived (timeout, DNS, refused)."""

    default_code = "transport-error"
    error_name = "TransportError"


class RemoteCallError(GatewayError):
    """Outbound call returned a non-2xx response."""

    default_code = "remote-call-failed"
    error_name = "RemoteCallError"

    def __init__(
        self,
        message: str,
        *,
        status: int,
        body: Any = None,
        code: str | None = None,
    ) -> None:
        self.status = status
        self.body = body
        super().__init__(
            message, code=code, details={"status": status, "body": body}
        )


class NotFoundError(RemoteCallError):
    """Upstream answered 404."""

    default_code = "not-found"
    error_name = "NotFoundError"


class ConflictError(RemoteCallError):
    """Upstream rejected the expected-version precondition."""

    default_code = "version-conflict"
    error_name = "ConflictError"


class ProviderError(GatewayError):
    """Firebase Admin SDK call failed."""

    default_code = "provider-error"
    error_name = "FirebaseError"


class RateLimitError(GatewayError):
    """Client exceeded its request budget for the current window."""

    default_code = "too-many-requests"
    error_name = "RateLimitError"

    def __init__(self, message: str, *, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(message)
