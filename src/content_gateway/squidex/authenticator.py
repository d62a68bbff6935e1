"""Client-credentials authentication against the Squidex identity server."""

from __future__ import annotations

import time
from collections.abc import Callable

import httpx
import structlog

from content_gateway.errors import AuthenticationError
from content_gateway.http import response_body
from content_gateway.squidex.models import (
    DEFAULT_TOKEN_MARGIN_SECONDS,
    SQUIDEX_SCOPE,
    BearerToken,
    TenantCredentials,
)

logger = structlog.get_logger()


class Authenticator:
    """Exchange tenant credentials for a bearer token.

    A single attempt per call; failures surface as ``AuthenticationError``
    and retrying is left to the caller.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        margin_seconds: int = DEFAULT_TOKEN_MARGIN_SECONDS,
        scope: str = SQUIDEX_SCOPE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http_client
        self._margin = margin_seconds
        self._scope = scope
        self._clock = clock

    async def authenticate(self, credentials: TenantCredentials) -> BearerToken:
        """Run the client-credentials grant for ``credentials``.

        Returns:
            Token whose ``expires_at`` is ``now + expires_in - margin``.

        Raises:
            AuthenticationError: endpoint unreachable, non-2xx, or a
                response without ``access_token``/``expires_in``.
        """
        log = logger.bind(tenant_id=credentials.tenant_id)
        try:
            response = await self._http.post(
                credentials.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": credentials.client_id,
                    "client_secret": credentials.client_secret,
                    "scope": self._scope,
                },
            )
        except httpx.TransportError as exc:
            log.error("squidex_auth_unreachable", error=str(exc))
            raise AuthenticationError(
                "Squidex authentication failed",
                code="squidex-auth-unreachable",
            ) from exc

        if not response.is_success:
            body = response_body(response)
            log.error(
                "squidex_auth_rejected",
                status_code=response.status_code,
                body=body,
            )
            raise AuthenticationError(
                "Squidex authentication failed",
                code="squidex-auth-rejected",
                status=response.status_code,
                details={"status": response.status_code, "body": body},
            )

        payload = response_body(response)
        if (
            not isinstance(payload, dict)
            or "access_token" not in payload
            or "expires_in" not in payload
        ):
            log.error("squidex_auth_malformed_response")
            raise AuthenticationError(
                "Squidex authentication returned no token",
                code="squidex-auth-malformed",
                status=response.status_code,
            )

        now = self._clock()
        expires_in = float(payload["expires_in"])
        token = BearerToken(
            value=str(payload["access_token"]),
            issued_scope=str(payload.get("scope", self._scope)),
            expires_at=now + expires_in - self._margin,
        )
        log.info("squidex_authenticated", expires_in=expires_in)
        return token
