"""Firestore document reads and writes addressed by path segments."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import structlog
from google.api_core.exceptions import GoogleAPICallError

from content_gateway.errors import ProviderError, ValidationError

logger = structlog.get_logger()


class DocumentStore:
    """Thin async wrapper around a ``google.cloud.firestore.Client``.

    Document paths arrive as segment lists (``["users", "u1"]``) and are
    joined with ``/``. Missing documents read as ``{}``.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def _document(self, segments: Sequence[str]) -> Any:
        if not segments or any(not str(s).strip() for s in segments):
            raise ValidationError(
                "Document path is required and must be a non-empty array",
                code="no-target-document",
            )
        path = "/".join(str(s) for s in segments)
        try:
            return self._client.document(path)
        except ValueError as exc:
            raise ValidationError(
                f"Invalid document path: {path}",
                code="invalid-document-path",
            ) from exc

    async def read(self, segments: Sequence[str]) -> dict[str, Any]:
        ref = self._document(segments)
        try:
            snapshot = await asyncio.to_thread(ref.get)
        except GoogleAPICallError as exc:
            logger.error("firestore_read_failed", path=ref.path, error=str(exc))
            raise ProviderError(
                "Firestore read failed", code="firestore-read-failed"
            ) from exc
        if not snapshot.exists:
            return {}
        return snapshot.to_dict() or {}

    async def write(
        self,
        segments: Sequence[str],
        data: dict[str, Any],
        *,
        merge: bool = False,
        merge_fields: Sequence[str] | None = None,
    ) -> None:
        """``set()`` the document; ``merge_fields`` takes precedence over ``merge``."""
        ref = self._document(segments)
        merge_arg: bool | list[str] = list(merge_fields) if merge_fields else merge
        try:
            await asyncio.to_thread(ref.set, data, merge=merge_arg)
        except GoogleAPICallError as exc:
            logger.error("firestore_write_failed", path=ref.path, error=str(exc))
            raise ProviderError(
                "Firestore write failed", code="firestore-write-failed"
            ) from exc
        logger.info("firestore_document_written", path=ref.path, merge=bool(merge_arg))
