"""Squidex content proxy endpoints.

Every endpoint accepts an ``app`` query parameter selecting the Squidex
app; without it the configured default app is used.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Response

from content_gateway.api.deps import get_tenant_registry
from content_gateway.api.schemas import SquidexConfigResponse
from content_gateway.errors import ValidationError
from content_gateway.squidex.client import ContentClient
from content_gateway.squidex.registry import TenantRegistry

router = APIRouter(prefix="/content", tags=["squidex"])

RegistryDep = Annotated[TenantRegistry, Depends(get_tenant_registry)]
AppQuery = Annotated[
    str | None,
    Query(description="Squidex app name; defaults to the configured app."),
]
ContentBody = Annotated[dict[str, Any] | None, Body()]
ExpectedVersion = Annotated[
    int | None,
    Query(alias="expectedVersion", description="Sent upstream as If-Match."),
]


class ContentAction(StrEnum):
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    ARCHIVE = "archive"
    RESTORE = "restore"


def _require(value: str, label: str, code: str) -> str:
    value = value.strip()
    if not value:
        raise ValidationError(f"{label} is required", code=code)
    return value


def _schema(schema: str) -> str:
    return _require(schema, "Schema name", "missing-schema")


def _content_id(content_id: str) -> str:
    return _require(content_id, "Content ID", "missing-content-id")


def _content_data(data: dict[str, Any] | None) -> dict[str, Any]:
    if not data:
        raise ValidationError(
            "Content data is required and must be a non-empty object",
            code="missing-content-data",
        )
    return data


@router.get("/config")
async def get_config(registry: RegistryDep) -> SquidexConfigResponse:
    """Squidex routing configuration (default URL/app and configured apps)."""
    return SquidexConfigResponse.model_validate(registry.describe())


@router.get("/{schema}")
async def list_content(
    schema: str,
    registry: RegistryDep,
    app: AppQuery = None,
    top: Annotated[int | None, Query(alias="$top", ge=0)] = None,
    skip: Annotated[int | None, Query(alias="$skip", ge=0)] = None,
    filter_: Annotated[str | None, Query(alias="$filter")] = None,
    orderby: Annotated[str | None, Query(alias="$orderby")] = None,
) -> dict[str, Any]:
    """List content items; OData-style parameters are passed through."""
    schema = _schema(schema)
    client = registry.resolve(app)
    return await client.list(
        schema,
        {"$top": top, "$skip": skip, "$filter": filter_, "$orderby": orderby},
    )


@router.post("/{schema}", status_code=201)
async def create_content(
    schema: str,
    registry: RegistryDep,
    data: ContentBody = None,
    app: AppQuery = None,
    publish: bool = False,
    content_id: Annotated[str | None, Query(alias="id")] = None,
) -> dict[str, Any]:
    """Create a content item, optionally published and with a fixed id."""
    schema = _schema(schema)
    data = _content_data(data)
    client = registry.resolve(app)
    return await client.create(
        schema, data, publish=publish, content_id=content_id
    )


@router.delete("/{schema}", include_in_schema=False)
async def delete_without_id(schema: str) -> None:
    raise ValidationError("Content ID is required", code="missing-content-id")


@router.get("/{schema}/{content_id}")
async def get_content(
    schema: str,
    content_id: str,
    registry: RegistryDep,
    app: AppQuery = None,
) -> dict[str, Any]:
    schema, content_id = _schema(schema), _content_id(content_id)
    client = registry.resolve(app)
    return await client.get_by_id(schema, content_id)


async def _update(
    registry: TenantRegistry,
    app: str | None,
    schema: str,
    content_id: str,
    data: dict[str, Any] | None,
    *,
    patch: bool,
    expected_version: int | None,
) -> dict[str, Any]:
    schema, content_id = _schema(schema), _content_id(content_id)
    data = _content_data(data)
    client = registry.resolve(app)
    return await client.update(
        schema, content_id, data, patch=patch, expected_version=expected_version
    )


@router.put("/{schema}/{content_id}")
async def replace_content(
    schema: str,
    content_id: str,
    registry: RegistryDep,
    data: ContentBody = None,
    app: AppQuery = None,
    expected_version: ExpectedVersion = None,
) -> dict[str, Any]:
    """Full update of a content item."""
    return await _update(
        registry,
        app,
        schema,
        content_id,
        data,
        patch=False,
        expected_version=expected_version,
    )


@router.patch("/{schema}/{content_id}")
async def patch_content(
    schema: str,
    content_id: str,
    registry: RegistryDep,
    data: ContentBody = None,
    app: AppQuery = None,
    expected_version: ExpectedVersion = None,
) -> dict[str, Any]:
    """Partial update of a content item."""
    return await _update(
        registry,
        app,
        schema,
        content_id,
        data,
        patch=True,
        expected_version=expected_version,
    )


@router.delete("/{schema}/{content_id}", status_code=204)
async def delete_content(
    schema: str,
    content_id: str,
    registry: RegistryDep,
    app: AppQuery = None,
    permanent: bool = False,
) -> Response:
    schema, content_id = _schema(schema), _content_id(content_id)
    client = registry.resolve(app)
    await client.delete(schema, content_id, permanent=permanent)
    return Response(status_code=204)


@router.put("/{schema}/{content_id}/{action}")
async def change_status(
    schema: str,
    content_id: str,
    action: ContentAction,
    registry: RegistryDep,
    app: AppQuery = None,
) -> dict[str, Any]:
    """Publish, unpublish, archive or restore a content item."""
    schema, content_id = _schema(schema), _content_id(content_id)
    client: ContentClient = registry.resolve(app)
    transitions = {
        ContentAction.PUBLISH: client.publish,
        ContentAction.UNPUBLISH: client.unpublish,
        ContentAction.ARCHIVE: client.archive,
        ContentAction.RESTORE: client.restore,
    }
    return await transitions[action](schema, content_id)
