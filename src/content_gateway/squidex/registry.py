"""Per-app routing of Squidex credentials and clients."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from content_gateway.errors import ConfigurationError, UnknownTenantError
from content_gateway.squidex.authenticator import Authenticator
from content_gateway.squidex.client import ContentClient
from content_gateway.squidex.models import TenantCredentials

if TYPE_CHECKING:
    from content_gateway.config import Settings

logger = structlog.get_logger()


class TenantRegistry:
    """Map app ids to lazily-built, cached ``ContentClient`` instances.

    One client per app for the registry's lifetime; clients are never
    evicted. An empty or missing app id resolves to the default app.
    """

    def __init__(
        self,
        tenants: Mapping[str, TenantCredentials],
        *,
        default_tenant: str,
        authenticator: Authenticator,
        http_client: httpx.AsyncClient,
        default_url: str = "",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tenants = dict(tenants)
        self._default_tenant = default_tenant
        self._default_url = default_url
        self._authenticator = authenticator
        self._http = http_client
        self._clock = clock
        self._clients: dict[str, ContentClient] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.time,
    ) -> TenantRegistry:
        """Build the registry from ``SQUIDEX_*`` settings.

        Raises:
            ConfigurationError: an app has no URL and there is no default.
        """
        default_url = settings.squidex_default_url.rstrip("/")
        tenants: dict[str, TenantCredentials] = {}
        for app, cfg in settings.squidex_apps.items():
            base_url = (cfg.url or default_url).rstrip("/")
            if not base_url:
                raise ConfigurationError(
                    f'Squidex app "{app}" has no url and SQUIDEX_DEFAULT_URL is not set',
                    code="missing-squidex-url",
                )
            tenants[app] = TenantCredentials(
                tenant_id=app,
                client_id=cfg.client_id,
                client_secret=cfg.client_secret.get_secret_value(),
                base_url=base_url,
            )
        authenticator = Authenticator(
            http_client,
            margin_seconds=settings.squidex_token_margin_seconds,
            clock=clock,
        )
        return cls(
            tenants,
            default_tenant=settings.squidex_default_app,
            authenticator=authenticator,
            http_client=http_client,
            default_url=default_url,
            clock=clock,
        )

    @property
    def default_tenant(self) -> str:
        return self._default_tenant

    def available_tenants(self) -> list[str]:
        return list(self._tenants)

    def credentials(self, tenant_id: str | None = None) -> TenantCredentials:
        """Credentials for ``tenant_id`` (or the default app).

        Raises:
            UnknownTenantError: no such app is configured.
        """
        resolved = tenant_id or self._default_tenant
        try:
            return self._tenants[resolved]
        except KeyError:
            raise UnknownTenantError(resolved, self._tenants) from None

    def resolve(self, tenant_id: str | None = None) -> ContentClient:
        """Return the cached client for the app, building it on first use."""
        creds = self.credentials(tenant_id)
        client = self._clients.get(creds.tenant_id)
        if client is None:
            client = ContentClient(
                creds, self._authenticator, self._http, clock=self._clock
            )
            self._clients[creds.tenant_id] = client
            logger.debug("squidex_client_created", tenant_id=creds.tenant_id)
        return client

    def describe(self) -> dict[str, Any]:
        """Configuration summary for diagnostics. Secrets are omitted."""
        return {
            "defaultUrl": self._default_url,
            "defaultApp": self._default_tenant,
            "availableApps": self.available_tenants(),
            "apps": {
                tenant_id: {"url": creds.base_url}
                for tenant_id, creds in self._tenants.items()
            },
        }
