"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from content_gateway.analytics import AnalyticsClient
from content_gateway.api.app import app
from content_gateway.api.deps import (
    get_analytics_client,
    get_document_store,
    get_identity_service,
    get_tenant_registry,
)
from content_gateway.auth.limits import rate_limiter
from content_gateway.firebase.documents import DocumentStore
from content_gateway.firebase.identity import IdentityService
from content_gateway.squidex.authenticator import Authenticator
from content_gateway.squidex.models import TenantCredentials
from content_gateway.squidex.registry import TenantRegistry

TOKEN_PATH = "/identity-server/connect/token"


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSquidex:
    """In-process stand-in for a Squidex installation.

    Token requests are answered with ``token-<n>``; content requests get the
    response registered for ``(method, path)`` or a generic item.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.expires_in = 3600
        self.token_status = 200
        self.responses: dict[tuple[str, str], tuple[int, Any]] = {}
        self.error: Exception | None = None

    def respond(self, method: str, path: str, status: int, body: Any = None) -> None:
        self.responses[(method, path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith(TOKEN_PATH):
            self.token_calls += 1
            if self.token_status != 200:
                return httpx.Response(
                    self.token_status, json={"error": "invalid_client"}
                )
            return httpx.Response(
                200,
                json={
                    "access_token": f"token-{self.token_calls}",
                    "token_type": "Bearer",
                    "expires_in": self.expires_in,
                },
            )
        if self.error is not None:
            raise self.error
        status, body = self.responses.get(
            (request.method, request.url.path),
            (200, {"id": "item-1", "data": {}, "version": 0}),
        )
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def content_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/api/content/" in r.url.path]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_squidex() -> FakeSquidex:
    return FakeSquidex()


@pytest.fixture()
async def squidex_http(
    fake_squidex: FakeSquidex,
) -> AsyncGenerator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake_squidex.handler)
    ) as client:
        yield client


@pytest.fixture()
def acme_credentials() -> TenantCredentials:
    return TenantCredentials(
        tenant_id="acme",
        client_id="cid",
        client_secret="secret",
        base_url="https://cms.example",
    )


@pytest.fixture()
def tenant_registry(
    squidex_http: httpx.AsyncClient, clock: FakeClock
) -> TenantRegistry:
    """Two Squidex apps on one fake installation; ``acme`` is the default."""
    tenants = {
        tenant_id: TenantCredentials(
            tenant_id=tenant_id,
            client_id=f"{tenant_id}-client",
            client_secret=f"{tenant_id}-secret",
            base_url="https://cms.example",
        )
        for tenant_id in ("acme", "globex")
    }
    return TenantRegistry(
        tenants,
        default_tenant="acme",
        authenticator=Authenticator(squidex_http, clock=clock),
        http_client=squidex_http,
        default_url="https://cms.example",
        clock=clock,
    )


@pytest.fixture()
def identity() -> AsyncMock:
    """IdentityService stub accepting the ID token ``valid-token`` only."""
    service = AsyncMock(spec=IdentityService)

    async def verify(id_token: str) -> dict[str, Any] | None:
        return {"uid": "u1"} if id_token == "valid-token" else None

    service.verify_id_token.side_effect = verify
    return service


@pytest.fixture()
def document_store() -> AsyncMock:
    return AsyncMock(spec=DocumentStore)


@pytest.fixture()
def analytics() -> AsyncMock:
    client = AsyncMock(spec=AnalyticsClient)
    client.send_event.return_value = True
    return client


@pytest.fixture()
async def api_client(
    tenant_registry: TenantRegistry,
    identity: AsyncMock,
    document_store: AsyncMock,
    analytics: AsyncMock,
) -> AsyncGenerator[httpx.AsyncClient]:
    """HTTP client for the gateway app with every service overridden."""
    app.dependency_overrides[get_tenant_registry] = lambda: tenant_registry
    app.dependency_overrides[get_identity_service] = lambda: identity
    app.dependency_overrides[get_document_store] = lambda: document_store
    app.dependency_overrides[get_analytics_client] = lambda: analytics
    rate_limiter.reset()
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    rate_limiter.reset()
    app.dependency_overrides.clear()
