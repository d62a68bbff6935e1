"""GA4 Measurement Protocol forwarder."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

COLLECT_URL = "https://www.google-analytics.com/mp/collect"


class AnalyticsClient:
    """Forward single events to the Measurement Protocol.

    Delivery is best effort: failures are logged and reported as False.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        measurement_id: str,
        api_secret: str,
    ) -> None:
        self._http = http_client
        self._measurement_id = measurement_id
        self._api_secret = api_secret

    async def send_event(
        self,
        client_id: str,
        event: str,
        params: dict[str, Any] | None = None,
    ) -> bool:
        """Send one event for ``client_id``. Returns whether it was accepted."""
        try:
            response = await self._http.post(
                COLLECT_URL,
                params={
                    "measurement_id": self._measurement_id,
                    "api_secret": self._api_secret,
                },
                json={
                    "client_id": client_id,
                    "events": [{"name": event, "params": params or {}}],
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("analytics_event_failed", event_name=event, error=str(exc))
            return False
        logger.debug("analytics_event_sent", event_name=event)
        return True
