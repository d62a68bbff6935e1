"""Firestore read/write endpoints guarded by ID token verification."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from content_gateway.api.deps import (
    get_document_store,
    get_identity_service,
    verified_claims,
)
from content_gateway.api.schemas import (
    DocumentReadRequest,
    DocumentReadResponse,
    DocumentWriteRequest,
    SuccessResponse,
)
from content_gateway.errors import ValidationError
from content_gateway.firebase.documents import DocumentStore
from content_gateway.firebase.identity import IdentityService

router = APIRouter(tags=["firestore"])

IdentityDep = Annotated[IdentityService, Depends(get_identity_service)]
StoreDep = Annotated[DocumentStore, Depends(get_document_store)]


def _document_path(document: list[str] | None) -> list[str]:
    if not document:
        raise ValidationError(
            "Document path is required and must be a non-empty array",
            code="no-target-document",
        )
    return document


@router.post("/fsread")
async def fsread(
    body: DocumentReadRequest,
    identity: IdentityDep,
    store: StoreDep,
) -> DocumentReadResponse:
    """Read one document; a missing document yields ``data: {}``."""
    if not body.id_token:
        raise ValidationError("ID token is required", code="missing-id-token")
    path = _document_path(body.document)
    await verified_claims(identity, body.id_token)
    return DocumentReadResponse(data=await store.read(path))


@router.post("/fswrite")
async def fswrite(
    body: DocumentWriteRequest,
    identity: IdentityDep,
    store: StoreDep,
) -> SuccessResponse:
    """Write (``set``) one document, optionally merging."""
    if not body.id_token:
        raise ValidationError("ID token is required", code="missing-id-token")
    path = _document_path(body.document)
    if body.data is None:
        raise ValidationError(
            "Data is required and must be an object", code="invalid-data"
        )
    await verified_claims(identity, body.id_token)

    options = body.options
    await store.write(
        path,
        body.data,
        merge=options.merge if options else False,
        merge_fields=options.merge_fields if options else None,
    )
    return SuccessResponse(success=True)
