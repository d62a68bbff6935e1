"""Shared outbound HTTP helpers."""

from __future__ import annotations

from typing import Any

import httpx

DEFAULT_TIMEOUT_SECONDS = 30.0


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the process-wide outbound client.

    Args:
        timeout: Per-request timeout in seconds (connect, read, write, pool).
        transport: Optional transport override, e.g. ``httpx.MockTransport``.
    """
    return httpx.AsyncClient(timeout=timeout, transport=transport)


def response_body(response: httpx.Response) -> Any:
    """Decoded JSON body when possible, raw text otherwise, None if empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
