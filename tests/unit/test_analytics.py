"""Tests for the Measurement Protocol forwarder."""

import json

import httpx

from content_gateway.analytics import COLLECT_URL, AnalyticsClient


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSendEvent:
    async def test_posts_single_event(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        async with _client(handler) as http:
            analytics = AnalyticsClient(
                http, measurement_id="G-123", api_secret="s3cr3t"
            )
            sent = await analytics.send_event(
                "client-1", "level_complete", {"level": 3}
            )

        assert sent is True
        [request] = seen
        assert str(request.url).startswith(COLLECT_URL)
        assert request.url.params["measurement_id"] == "G-123"
        assert request.url.params["api_secret"] == "s3cr3t"
        assert json.loads(request.content) == {
            "client_id": "client-1",
            "events": [{"name": "level_complete", "params": {"level": 3}}],
        }

    async def test_params_default_to_empty(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        async with _client(handler) as http:
            analytics = AnalyticsClient(http, measurement_id="G-1", api_secret="s")
            await analytics.send_event("c", "start")

        assert json.loads(seen[0].content)["events"] == [
            {"name": "start", "params": {}}
        ]

    async def test_rejected_event_returns_false(self) -> None:
        async with _client(lambda r: httpx.Response(400)) as http:
            analytics = AnalyticsClient(http, measurement_id="G-1", api_secret="s")
            assert await analytics.send_event("c", "start") is False

    async def test_unreachable_endpoint_returns_false(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(refuse) as http:
            analytics = AnalyticsClient(http, measurement_id="G-1", api_secret="s")
            assert await analytics.send_event("c", "start") is False
