"""Tenant-scoped Squidex content API client."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import Any, cast
from urllib.parse import quote

import httpx
import structlog

from content_gateway.errors import (
    ConflictError,
    NotFoundError,
    RemoteCallError,
    TransportError,
    ValidationError,
)
from content_gateway.http import response_body
from content_gateway.squidex.authenticator import Authenticator
from content_gateway.squidex.models import BearerToken, ContentData, TenantCredentials

logger = structlog.get_logger()

# Squidex answers 412 to a stale If-Match, some proxies 409.
CONFLICT_STATUSES = frozenset({409, 412})


def _segment(value: str) -> str:
    """Percent-encode one URL path segment; dot segments are rejected."""
    if value in (".", ".."):
        raise ValidationError(
            f"Invalid path segment: {value!r}", code="invalid-path-segment"
        )
    return quote(value, safe="")


class ContentClient:
    """CRUD and lifecycle operations for one Squidex app.

    Owns the app's bearer token. Every remote call goes through
    ``ensure_authenticated()`` first, so an expired token is replaced
    before it is used. Concurrent callers may both refresh on expiry;
    the last assignment wins.

    Usage::

        client = ContentClient(credentials, authenticator, http_client)
        page = await client.list("articles", {"$top": 10})
    """

    def __init__(
        self,
        credentials: TenantCredentials,
        authenticator: Authenticator,
        http_client: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.credentials = credentials
        self._authenticator = authenticator
        self._http = http_client
        self._clock = clock
        self._token: BearerToken | None = None

    @property
    def tenant_id(self) -> str:
        return self.credentials.tenant_id

    @property
    def current_token(self) -> BearerToken | None:
        return self._token

    async def ensure_authenticated(self) -> None:
        """Fetch a new token when none is cached or the cached one expired."""
        if self._token is not None and self._token.is_valid(self._clock()):
            return
        self._token = await self._authenticator.authenticate(self.credentials)

    # --- Read ---

    async def list(
        self,
        schema: str,
        query: Mapping[str, Any] | None = None,
    ) -> ContentData:
        """List items of ``schema``; returns ``{"total": ..., "items": [...]}``.

        ``query`` ($top, $skip, $filter, $orderby, ...) is passed through
        verbatim; None values are dropped.
        """
        params = {k: v for k, v in (query or {}).items() if v is not None}
        return await self._request("GET", self._url(schema), params=params)

    async def get_by_id(self, schema: str, content_id: str) -> ContentData:
        return await self._request("GET", self._url(schema, content_id))

    # --- Write ---

    async def create(
        self,
        schema: str,
        data: ContentData,
        *,
        publish: bool = False,
        content_id: str | None = None,
    ) -> ContentData:
        """Create an item, optionally published at once and with a given id."""
        params: dict[str, Any] = {}
        if publish:
            params["publish"] = "true"
        if content_id:
            params["id"] = content_id
        return await self._request(
            "POST", self._url(schema), params=params, json=data
        )

    async def update(
        self,
        schema: str,
        content_id: str,
        data: ContentData,
        *,
        patch: bool = False,
        expected_version: int | None = None,
    ) -> ContentData:
        """Replace (PUT) or partially update (PATCH) an item.

        Args:
            patch: Send PATCH instead of PUT.
            expected_version: Sent as ``If-Match``; a mismatch upstream
                raises ``ConflictError``.
        """
        headers: dict[str, str] = {}
        if expected_version is not None:
            headers["If-Match"] = str(expected_version)
        return await self._request(
            "PATCH" if patch else "PUT",
            self._url(schema, content_id),
            json=data,
            headers=headers,
        )

    async def delete(
        self, schema: str, content_id: str, *, permanent: bool = False
    ) -> None:
        """Delete an item; ``permanent`` skips the upstream trash."""
        params = {"permanent": "true"} if permanent else {}
        await self._request("DELETE", self._url(schema, content_id), params=params)

    # --- Lifecycle ---

    async def publish(self, schema: str, content_id: str) -> ContentData:
        return await self._transition(schema, content_id, "publish")

    async def unpublish(self, schema: str, content_id: str) -> ContentData:
        return await self._transition(schema, content_id, "unpublish")

    async def archive(self, schema: str, content_id: str) -> ContentData:
        return await self._transition(schema, content_id, "archive")

    async def restore(self, schema: str, content_id: str) -> ContentData:
        return await self._transition(schema, content_id, "restore")

    async def _transition(
        self, schema: str, content_id: str, action: str
    ) -> ContentData:
        return await self._request(
            "PUT", f"{self._url(schema, content_id)}/{_segment(action)}", json={}
        )

    # --- Plumbing ---

    def _url(self, schema: str, content_id: str | None = None) -> str:
        url = f"{self.credentials.content_url}/{_segment(schema)}"
        if content_id is not None:
            url = f"{url}/{_segment(content_id)}"
        return url

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        await self.ensure_authenticated()
        token = cast(BearerToken, self._token)

        log = logger.bind(tenant_id=self.tenant_id, method=method, url=url)
        try:
            response = await self._http.request(
                method,
                url,
                params=params or None,
                json=json,
                headers={
                    "Authorization": f"Bearer {token.value}",
                    **(headers or {}),
                },
            )
        except httpx.TransportError as exc:
            log.error("squidex_transport_error", error=str(exc))
            raise TransportError(
                f"Squidex request failed: {type(exc).__name__}"
            ) from exc

        if response.is_success:
            return response_body(response)

        body = response_body(response)
        status = response.status_code
        log.warning("squidex_request_failed", status_code=status)
        if status == 404:
            raise NotFoundError("Content not found", status=status, body=body)
        if status in CONFLICT_STATUSES:
            raise ConflictError(
                "Content version does not match", status=status, body=body
            )
        message = body.get("message") if isinstance(body, dict) else None
        raise RemoteCallError(
            message or f"Squidex API returned {status}", status=status, body=body
        )
