"""Outline knowledge-base client via its RPC-style HTTP API.

Every Outline endpoint is a ``POST /api/<method>`` with a JSON body and a
Bearer API key.  Three methods are used:

* ``documents.list``   -- paginated listing, newest ``updatedAt`` first
* ``documents.info``   -- one document by id (parent title lookup)
* ``collections.info`` -- one collection by id (collection name lookup)

Includes bounded retry with exponential backoff on 429 and 5xx responses
and on transport errors.  Follows the same adapter shape as the other
HTTP providers: injected ``httpx.AsyncClient``, a private request helper,
typed Pydantic models out.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from outline_rag.interfaces.document_source import IDocumentSource
from outline_rag.models.documents import Collection, DocumentPage, RawDocument
from outline_rag.utils.errors import DocumentSourceError, RateLimitError
from outline_rag.utils.logging import get_logger

_RETRY_BACKOFF = 1.0  # seconds; doubled on every further attempt


class OutlineDocumentSource(IDocumentSource):
    """Reads documents and collections from an Outline instance.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    base_url:
        Root URL of the Outline instance, e.g. ``https://docs.example.com``.
    api_key:
        Outline API key, sent as a Bearer token.
    collection_id:
        When set, ``documents.list`` is restricted to this collection.
    max_retries:
        Attempts per request before giving up on 429/5xx/transport errors.
    retry_backoff:
        Base backoff in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        collection_id: str = "",
        max_retries: int = 3,
        retry_backoff: float = _RETRY_BACKOFF,
    ) -> None:
        self._http = http_client
        self._api_root = f"{base_url.rstrip('/')}/api"
        self._api_key = api_key
        self._collection_id = collection_id
        self._max_retries = max(1, max_retries)
        self._retry_backoff = retry_backoff
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IDocumentSource implementation
    # ------------------------------------------------------------------

    async def list_documents(self, page: int, page_size: int) -> DocumentPage:
        """Fetch page *page* (zero-indexed) sorted by ``updatedAt`` descending."""
        payload: dict[str, Any] = {
            "offset": page * page_size,
            "limit": page_size,
            "sort": "updatedAt",
            "direction": "DESC",
        }
        if self._collection_id:
            payload["collectionId"] = self._collection_id

        self._logger.info(
            "outline_list_documents",
            page=page,
            offset=payload["offset"],
            limit=page_size,
        )
        body = await self._request("documents.list", payload)

        documents = [self._parse_document(item) for item in body.get("data") or []]
        pagination = body.get("pagination") or {}
        total = int(pagination.get("total", len(documents)))
        return DocumentPage(documents=documents, total_count=total)

    async def get_document(self, document_id: str) -> RawDocument:
        body = await self._request("documents.info", {"id": document_id})
        return self._parse_document(body.get("data") or {})

    async def get_collection(self, collection_id: str) -> Collection:
        body = await self._request("collections.info", {"id": collection_id})
        data = body.get("data") or {}
        return Collection(
            id=data.get("id", collection_id),
            name=data.get("name") or "",
            url=data.get("url") or "",
        )

    def get_provider_name(self) -> str:
        return "outline"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST to ``/api/<method>`` with retry logic and return the JSON body.

        Raises
        ------
        RateLimitError
            When the server still answers 429 after the last attempt.
        DocumentSourceError
            On any other non-2xx response or transport failure.
        """
        url = f"{self._api_root}/{method}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        last_status: int | None = None
        last_error = ""
        for attempt in range(1, self._max_retries + 1):
            try:
                response = await self._http.post(url, json=payload, headers=headers)
            except httpx.HTTPError as exc:
                last_error = str(exc) or type(exc).__name__
                self._logger.warning(
                    "outline_request_failed",
                    method=method,
                    error=last_error,
                    attempt=attempt,
                )
            else:
                if response.is_success:
                    return response.json()

                last_status = response.status_code
                last_error = f"HTTP {response.status_code}"
                if response.status_code != 429 and response.status_code < 500:
                    raise DocumentSourceError(
                        message=f"Outline {method} returned HTTP {response.status_code}",
                        provider_name=self.get_provider_name(),
                    )
                self._logger.warning(
                    "outline_retryable_status",
                    method=method,
                    status=response.status_code,
                    attempt=attempt,
                )

            if attempt < self._max_retries:
                await asyncio.sleep(self._retry_backoff * (2 ** (attempt - 1)))

        if last_status == 429:
            raise RateLimitError(
                message=f"Outline {method} rate limited after {self._max_retries} attempts",
                provider_name=self.get_provider_name(),
            )
        raise DocumentSourceError(
            message=f"Outline {method} failed after {self._max_retries} attempts: {last_error}",
            provider_name=self.get_provider_name(),
        )

    @staticmethod
    def _parse_document(data: dict[str, Any]) -> RawDocument:
        """Map an Outline document payload (camelCase) onto :class:`RawDocument`."""
        return RawDocument(
            id=data["id"],
            title=data.get("title") or "",
            text=data.get("text") or "",
            url=data.get("url") or "",
            parent_document_id=data.get("parentDocumentId"),
            collection_id=data.get("collectionId"),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            published_at=data.get("publishedAt"),
            deleted_at=data.get("deletedAt"),
            tags=[t for t in data.get("tags") or [] if isinstance(t, str)],
        )
