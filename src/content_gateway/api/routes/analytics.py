"""Analytics event forwarding endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from content_gateway.analytics import AnalyticsClient
from content_gateway.api.deps import (
    get_analytics_client,
    get_identity_service,
    verified_claims,
)
from content_gateway.api.schemas import SendEventRequest, SuccessResponse
from content_gateway.auth.limits import API_POLICY, rate_limited
from content_gateway.errors import AuthenticationError, ValidationError
from content_gateway.firebase.identity import IdentityService

router = APIRouter(tags=["analytics"])

IdentityDep = Annotated[IdentityService, Depends(get_identity_service)]
AnalyticsDep = Annotated[AnalyticsClient, Depends(get_analytics_client)]


@router.post("/sendevent", dependencies=[Depends(rate_limited(API_POLICY))])
async def send_event(
    body: SendEventRequest,
    identity: IdentityDep,
    analytics: AnalyticsDep,
) -> SuccessResponse:
    """Forward one event for an authenticated user.

    Returns ``success: false`` (HTTP 200) when the measurement endpoint
    does not accept the event.
    """
    if not body.id_token:
        raise AuthenticationError("ID token is required", code="missing-id-token")
    await verified_claims(identity, body.id_token)
    if not body.client_id or not body.event:
        raise ValidationError(
            "client_id and event are required", code="missing-event"
        )
    sent = await analytics.send_event(body.client_id, body.event, body.params)
    return SuccessResponse(success=sent)
