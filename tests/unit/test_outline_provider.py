"""Unit tests for the Outline document source (httpx.MockTransport based)."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from outline_rag.providers.outline.outline_provider import OutlineDocumentSource
from outline_rag.utils.errors import DocumentSourceError, RateLimitError

_DOC_PAYLOAD = {
    "id": "doc-1",
    "title": "Auth",
    "text": "# API Authentication\nOur API uses JWT tokens.",
    "url": "/doc/auth-abc123",
    "parentDocumentId": "doc-api",
    "collectionId": "col-eng",
    "createdAt": "2024-01-10T09:00:00.000Z",
    "updatedAt": "2024-03-01T12:30:00.000Z",
    "publishedAt": "2024-01-11T00:00:00.000Z",
    "deletedAt": None,
}


def _source(handler, **kwargs) -> OutlineDocumentSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    defaults = {
        "base_url": "https://docs.example.com/",
        "api_key": "ol_api_test",
        "retry_backoff": 0.0,
    }
    defaults.update(kwargs)
    return OutlineDocumentSource(http_client=client, **defaults)


class TestListDocuments:
    @pytest.mark.asyncio
    async def test_request_shape_and_parsing(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "data": [_DOC_PAYLOAD],
                    "pagination": {"offset": 100, "limit": 100, "total": 150},
                },
            )

        page = await _source(handler).list_documents(page=1, page_size=100)

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://docs.example.com/api/documents.list"
        assert request.headers["Authorization"] == "Bearer ol_api_test"
        assert json.loads(request.content) == {
            "offset": 100,
            "limit": 100,
            "sort": "updatedAt",
            "direction": "DESC",
        }

        assert page.total_count == 150
        [doc] = page.documents
        assert doc.id == "doc-1"
        assert doc.parent_document_id == "doc-api"
        assert doc.collection_id == "col-eng"
        assert doc.updated_at == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)
        assert doc.deleted_at is None
        assert doc.tags == []

    @pytest.mark.asyncio
    async def test_collection_filter_is_sent(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"data": [], "pagination": {"total": 0}})

        await _source(handler, collection_id="col-eng").list_documents(page=0, page_size=25)
        assert bodies[0]["collectionId"] == "col-eng"
        assert bodies[0]["offset"] == 0

    @pytest.mark.asyncio
    async def test_missing_pagination_falls_back_to_page_length(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [_DOC_PAYLOAD]})

        page = await _source(handler).list_documents(page=0, page_size=10)
        assert page.total_count == 1


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_document(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/documents.info"
            assert json.loads(request.content) == {"id": "doc-api"}
            return httpx.Response(200, json={"data": {"id": "doc-api", "title": "API"}})

        doc = await _source(handler).get_document("doc-api")
        assert doc.title == "API"
        assert doc.text == ""

    @pytest.mark.asyncio
    async def test_get_collection(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/collections.info"
            return httpx.Response(200, json={"data": {"id": "col-eng", "name": "Engineering"}})

        collection = await _source(handler).get_collection("col-eng")
        assert collection.name == "Engineering"


class TestRetries:
    @pytest.mark.asyncio
    async def test_retries_server_errors_then_succeeds(self) -> None:
        responses = iter([httpx.Response(503), httpx.Response(500)])

        def handler(request: httpx.Request) -> httpx.Response:
            return next(responses, httpx.Response(200, json={"data": {"id": "c", "name": "Ops"}}))

        collection = await _source(handler, max_retries=3).get_collection("c")
        assert collection.name == "Ops"

    @pytest.mark.asyncio
    async def test_persistent_429_raises_rate_limit_error(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(429)

        with pytest.raises(RateLimitError, match="rate limited"):
            await _source(handler, max_retries=2).get_collection("c")
        assert calls == 2

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(401)

        with pytest.raises(DocumentSourceError, match="HTTP 401") as exc_info:
            await _source(handler, max_retries=3).list_documents(page=0, page_size=10)
        assert calls == 1
        assert not isinstance(exc_info.value, RateLimitError)
        assert exc_info.value.provider_name == "outline"

    @pytest.mark.asyncio
    async def test_transport_errors_exhaust_retries(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DocumentSourceError, match="after 3 attempts"):
            await _source(handler, max_retries=3).get_document("doc-1")


def test_provider_name() -> None:
    source = _source(lambda request: httpx.Response(200, json={}))
    assert source.get_provider_name() == "outline"
