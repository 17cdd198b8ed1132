# src/client/http_client.py - v1
"""HTTP implementation of the remote search API (httpx).

Endpoints:
    GET {base}/search/suggestions?q=...&limit=...
    GET {base}/search/products?q=...&<filters>

Payloads come in several shapes depending on the backend version; they are
normalized here so the rest of the package only ever sees SearchResponse.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from searchcache.client.base_client import BaseSearchClient, SearchApiError
from searchcache.core.models import FilterSet, SearchMeta, SearchResponse, SuggestionItem

logger = logging.getLogger(__name__)

MIN_SUGGESTION_CHARS = 2


class HttpSearchClient(BaseSearchClient):
    """Async client for the product search API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        search_path: str = "/search/products",
        suggestions_path: str = "/search/suggestions",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._search_path = search_path
        self._suggestions_path = suggestions_path
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout
        )

    async def get_suggestions(self, query: str, limit: int = 10) -> list[SuggestionItem]:
        term = query.strip()
        if len(term) < MIN_SUGGESTION_CHARS:
            return []

        payload = await self._get(self._suggestions_path, {"q": term, "limit": str(limit)})
        data = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(data, list):
            return []

        items: list[SuggestionItem] = []
        for raw in data:
            try:
                items.append(SuggestionItem.model_validate(raw))
            except ValidationError:
                logger.debug("Skipping malformed suggestion: %r", raw)
        return items

    async def search(self, query: str, filters: FilterSet | None = None) -> SearchResponse:
        params: dict[str, str] = {"q": query.strip()}
        for key, value in (filters or {}).items():
            if value is None or value == "":
                continue
            params[key] = str(value).lower() if isinstance(value, bool) else str(value)

        start = time.monotonic()
        payload = await self._get(self._search_path, params)
        response = normalize_search_payload(payload, query)
        logger.info(
            "Search OK | results=%d | %dms | query=%s",
            len(response.results), int((time.monotonic() - start) * 1000), query[:80],
        )
        return response

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, str]) -> Any:
        try:
            resp = await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise SearchApiError(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            raise SearchApiError(f"Request to {path} failed: {e}") from e

        if resp.status_code >= 400:
            message = _error_message(resp) or f"HTTP {resp.status_code}"
            raise SearchApiError(message, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            raise SearchApiError(f"Invalid JSON from {path}") from e

        if isinstance(payload, dict) and payload.get("success") is False:
            raise SearchApiError(payload.get("message") or "Search failed")
        return payload


def normalize_search_payload(payload: Any, query: str = "") -> SearchResponse:
    """Normalize ``{data|products, searchInfo|pagination}`` shapes.

    A bare list is accepted as the result page with no meta.
    """
    if isinstance(payload, list):
        return SearchResponse(results=payload)
    if not isinstance(payload, dict):
        return SearchResponse()

    results: list[dict[str, Any]] = []
    for field in ("data", "products"):
        value = payload.get(field)
        if isinstance(value, list):
            results = value
            break

    meta: SearchMeta | None = None
    info = payload.get("searchInfo")
    pagination = payload.get("pagination")
    if isinstance(info, dict):
        meta = SearchMeta.model_validate(info)
    elif isinstance(pagination, dict):
        meta = SearchMeta(query=query or None, total_results=pagination.get("total"))

    return SearchResponse(results=results, meta=meta)


def _error_message(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None
