"""Tests for /fsread and /fswrite."""

from unittest.mock import AsyncMock

from httpx import AsyncClient

PATH = ["users", "u1", "saves", "slot1"]


class TestRead:
    async def test_reads_document(
        self, api_client: AsyncClient, document_store: AsyncMock
    ) -> None:
        document_store.read.return_value = {"level": 4}

        response = await api_client.post(
            "/fsread", json={"idToken": "valid-token", "document": PATH}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"level": 4}}
        document_store.read.assert_awaited_once_with(PATH)

    async def test_missing_document_is_empty(
        self, api_client: AsyncClient, document_store: AsyncMock
    ) -> None:
        document_store.read.return_value = {}

        response = await api_client.post(
            "/fsread", json={"idToken": "valid-token", "document": PATH}
        )

        assert response.json() == {"success": True, "data": {}}

    async def test_token_checked_before_path(
        self, api_client: AsyncClient, identity: AsyncMock
    ) -> None:
        response = await api_client.post("/fsread", json={"document": []})

        assert response.status_code == 400
        assert response.json()["code"] == "missing-id-token"
        identity.verify_id_token.assert_not_awaited()

    async def test_empty_path(
        self, api_client: AsyncClient, document_store: AsyncMock
    ) -> None:
        response = await api_client.post(
            "/fsread", json={"idToken": "valid-token", "document": []}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "no-target-document"
        document_store.read.assert_not_awaited()

    async def test_invalid_token(
        self, api_client: AsyncClient, document_store: AsyncMock
    ) -> None:
        response = await api_client.post(
            "/fsread", json={"idToken": "forged", "document": PATH}
        )

        assert response.status_code == 401
        document_store.read.assert_not_awaited()


class TestWrite:
    async def test_writes_with_options(
        self, api_client: AsyncClient, document_store: AsyncMock
    ) -> None:
        response = await api_client.post(
            "/fswrite",
            json={
                "idToken": "valid-token",
                "document": PATH,
                "data": {"score": 10},
                "options": {"merge": True, "mergeFields": ["score"]},
            },
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        document_store.write.assert_awaited_once_with(
            PATH, {"score": 10}, merge=True, merge_fields=["score"]
        )

    async def test_writes_without_options(
        self, api_client: AsyncClient, document_store: AsyncMock
    ) -> None:
        await api_client.post(
            "/fswrite",
            json={"idToken": "valid-token", "document": PATH, "data": {"a": 1}},
        )

        document_store.write.assert_awaited_once_with(
            PATH, {"a": 1}, merge=False, merge_fields=None
        )

    async def test_missing_data(
        self, api_client: AsyncClient, document_store: AsyncMock
    ) -> None:
        response = await api_client.post(
            "/fswrite", json={"idToken": "valid-token", "document": PATH}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid-data"
        document_store.write.assert_not_awaited()

    async def test_non_object_data(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/fswrite",
            json={"idToken": "valid-token", "document": PATH, "data": [1, 2]},
        )

        assert response.status_code == 400
