"""Squidex headless CMS access with per-app credentials."""

from content_gateway.squidex.authenticator import Authenticator
from content_gateway.squidex.client import ContentClient
from content_gateway.squidex.models import BearerToken, TenantCredentials
from content_gateway.squidex.registry import TenantRegistry

__all__ = [
    "Authenticator",
    "BearerToken",
    "ContentClient",
    "TenantCredentials",
    "TenantRegistry",
]
