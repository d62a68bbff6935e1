"""FastAPI dependency injection.

Service objects are created during lifespan startup and kept on
``app.state``; tests replace them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Any, cast

from fastapi import Request

from content_gateway.analytics import AnalyticsClient
from content_gateway.errors import AuthenticationError, ValidationError
from content_gateway.firebase.documents import DocumentStore
from content_gateway.firebase.identity import IdentityService
from content_gateway.squidex.registry import TenantRegistry

__all__ = [
    "get_analytics_client",
    "get_document_store",
    "get_identity_service",
    "get_tenant_registry",
    "verified_claims",
]


async def get_tenant_registry(request: Request) -> TenantRegistry:
    return cast(TenantRegistry, request.app.state.tenant_registry)


async def get_identity_service(request: Request) -> IdentityService:
    return cast(IdentityService, request.app.state.identity_service)


async def get_document_store(request: Request) -> DocumentStore:
    return cast(DocumentStore, request.app.state.document_store)


async def get_analytics_client(request: Request) -> AnalyticsClient:
    return cast(AnalyticsClient, request.app.state.analytics_client)


async def verified_claims(
    identity: IdentityService, id_token: str | None
) -> dict[str, Any]:
    """Verify an ID token taken from a request body.

    Raises:
        ValidationError: token missing.
        AuthenticationError: token invalid, expired or revoked.
    """
    if not id_token:
        raise ValidationError("ID token is required", code="missing-id-token")
    claims = await identity.verify_id_token(id_token)
    if claims is None:
        raise AuthenticationError(
            "Invalid or expired ID token", code="invalid-token"
        )
    return claims
