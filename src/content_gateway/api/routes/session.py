"""Firebase session endpoints: login, refresh, logout, user lookup."""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends

from content_gateway.api.deps import get_identity_service, verified_claims
from content_gateway.api.schemas import (
    CustomTokenResponse,
    IdTokenRequest,
    LoginRequest,
    LogoutResponse,
    RefreshRequest,
)
from content_gateway.auth.limits import AUTH_POLICY, rate_limited
from content_gateway.errors import ValidationError
from content_gateway.firebase.identity import IdentityService

logger = structlog.get_logger()

router = APIRouter(tags=["session"])

IdentityDep = Annotated[IdentityService, Depends(get_identity_service)]
AuthLimited = [Depends(rate_limited(AUTH_POLICY))]


@router.post("/login", dependencies=AuthLimited)
async def login(body: LoginRequest, identity: IdentityDep) -> dict[str, Any]:
    """Email/password sign-in; returns the provider's token payload."""
    if not body.email or not body.password:
        raise ValidationError(
            "Email and password are required", code="missing-credentials"
        )
    return await identity.sign_in_with_password(body.email, body.password)


@router.post("/refresh", dependencies=AuthLimited)
async def refresh(body: RefreshRequest, identity: IdentityDep) -> dict[str, Any]:
    """Exchange a refresh token for a new ID token."""
    if not body.refresh_token:
        raise ValidationError(
            "Refresh token is required", code="missing-refresh-token"
        )
    return await identity.refresh_id_token(body.refresh_token)


@router.post("/logout")
async def logout(body: IdTokenRequest, identity: IdentityDep) -> LogoutResponse:
    """Revoke every refresh token of the token's user."""
    claims = await verified_claims(identity, body.id_token)
    await identity.revoke_refresh_tokens(claims["uid"])
    return LogoutResponse()


@router.post("/userinfo")
async def userinfo(body: IdTokenRequest, identity: IdentityDep) -> dict[str, Any]:
    claims = await verified_claims(identity, body.id_token)
    return await identity.get_user_info(claims["uid"])


@router.post("/user-custom-token")
async def user_custom_token(
    body: IdTokenRequest, identity: IdentityDep
) -> CustomTokenResponse:
    """Mint a custom token for the user behind a valid ID token."""
    claims = await verified_claims(identity, body.id_token)
    token = await identity.create_custom_token(claims["uid"])
    logger.info("custom_token_issued", uid=claims["uid"])
    return CustomTokenResponse(custom_token=token)


# Legacy clients call the custom-token endpoint under /auth.
auth_router = APIRouter(prefix="/auth", tags=["session"])
auth_router.add_api_route(
    "/user-custom-token", user_custom_token, methods=["POST"]
)
