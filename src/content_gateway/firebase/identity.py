"""Firebase Authentication operations: token checks, sessions, user records.

Admin SDK calls are blocking and run in a worker thread. Email/password
sign-in and refresh-token exchange go through the public REST endpoints
with the project's Web API key.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

import httpx
import structlog
from firebase_admin import App, auth
from firebase_admin.exceptions import FirebaseError

from content_gateway.errors import (
    AuthenticationError,
    ConfigurationError,
    ProviderError,
    RemoteCallError,
    TransportError,
)
from content_gateway.http import response_body

logger = structlog.get_logger()

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"


def _provider_error(
    exc: Exception, message: str, fallback_code: str
) -> ProviderError:
    code = getattr(exc, "code", None)
    return ProviderError(
        message,
        code=str(code).lower() if code else fallback_code,
        details={"reason": str(exc)},
    )


def _iso_from_millis(value: int | None) -> str | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, UTC).isoformat()


def user_record_to_dict(user: auth.UserRecord) -> dict[str, Any]:
    """Serialize a UserRecord with the field names web clients expect."""
    metadata = user.user_metadata
    return {
        "uid": user.uid,
        "email": user.email,
        "emailVerified": user.email_verified,
        "displayName": user.display_name,
        "photoURL": user.photo_url,
        "disabled": user.disabled,
        "metadata": {
            "creationTime": _iso_from_millis(metadata.creation_timestamp),
            "lastSignInTime": _iso_from_millis(metadata.last_sign_in_timestamp),
        },
        "providerData": [
            {
                "providerId": info.provider_id,
                "uid": info.uid,
                "displayName": info.display_name,
                "email": info.email,
                "phoneNumber": info.phone_number,
                "photoURL": info.photo_url,
            }
            for info in user.provider_data
        ],
    }


class IdentityService:
    """Firebase Authentication facade used by the session routes."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        web_api_key: str = "",
        app: App | None = None,
    ) -> None:
        self._http = http_client
        self._web_api_key = web_api_key
        self._app = app

    # --- Admin SDK ---

    async def verify_id_token(self, id_token: str) -> dict[str, Any] | None:
        """Decoded claims, or None when the token is invalid or revoked.

        An invalid token is an expected outcome, so every verification
        failure is reported as None rather than raised.
        """
        try:
            return await asyncio.to_thread(
                auth.verify_id_token, id_token, app=self._app, check_revoked=True
            )
        except (ValueError, FirebaseError) as exc:
            logger.info("id_token_rejected", reason=type(exc).__name__)
            return None

    async def create_custom_token(self, uid: str) -> str:
        try:
            token = await asyncio.to_thread(
                auth.create_custom_token, uid, app=self._app
            )
        except (ValueError, FirebaseError) as exc:
            logger.error("custom_token_failed", uid=uid, error=str(exc))
            raise _provider_error(
                exc, "Failed to create custom token", "custom-token-creation-failed"
            ) from exc
        return token.decode() if isinstance(token, bytes) else str(token)

    async def revoke_refresh_tokens(self, uid: str) -> None:
        try:
            await asyncio.to_thread(auth.revoke_refresh_tokens, uid, app=self._app)
        except (ValueError, FirebaseError) as exc:
            logger.error("revoke_tokens_failed", uid=uid, error=str(exc))
            raise _provider_error(
                exc, "Failed to revoke tokens", "revocation-failed"
            ) from exc
        logger.info("refresh_tokens_revoked", uid=uid)

    async def get_user_info(self, uid: str) -> dict[str, Any]:
        try:
            user = await asyncio.to_thread(auth.get_user, uid, app=self._app)
        except (ValueError, FirebaseError) as exc:
            logger.error("get_user_failed", uid=uid, error=str(exc))
            raise _provider_error(
                exc, "Failed to fetch user record", "user-lookup-failed"
            ) from exc
        return user_record_to_dict(user)

    # --- REST ---

    async def sign_in_with_password(
        self, email: str, password: str
    ) -> dict[str, Any]:
        """Exchange email/password for ``idToken`` + ``refreshToken``."""
        return await self._post_rest(
            SIGN_IN_URL,
            {"email": email, "password": password, "returnSecureToken": True},
            operation="sign_in",
        )

    async def refresh_id_token(self, refresh_token: str) -> dict[str, Any]:
        """Exchange a refresh token for a fresh ID token."""
        return await self._post_rest(
            SECURE_TOKEN_URL,
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            operation="refresh",
        )

    async def _post_rest(
        self, url: str, payload: dict[str, Any], *, operation: str
    ) -> dict[str, Any]:
        if not self._web_api_key:
            raise ConfigurationError(
                "Firebase Web API Key is not configured",
                code="missing-firebase-api-key",
            )

        log = logger.bind(operation=operation)
        try:
            response = await self._http.post(
                url, params={"key": self._web_api_key}, json=payload
            )
        except httpx.TransportError as exc:
            log.error("identity_transport_error", error=str(exc))
            raise TransportError(
                f"Identity provider unreachable: {type(exc).__name__}"
            ) from exc

        body = response_body(response)
        if response.is_success and isinstance(body, dict):
            return body

        error = body.get("error") if isinstance(body, dict) else None
        code = error.get("message") if isinstance(error, dict) else None
        log.warning(
            "identity_request_rejected",
            status_code=response.status_code,
            code=code,
        )
        if 400 <= response.status_code < 500:
            raise AuthenticationError(
                "Identity provider rejected the request",
                code=code or "unknown-error",
                status=response.status_code,
                details=body,
            )
        raise RemoteCallError(
            "Identity provider error",
            status=response.status_code,
            body=body,
            code=code,
        )
