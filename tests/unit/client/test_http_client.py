# tests/unit/client/test_http_client.py - v1
"""Tests for client/http_client.py, using httpx.MockTransport (no network)."""

from __future__ import annotations

import json

import httpx
import pytest

from searchcache.client.base_client import BaseSearchClient, SearchApiError
from searchcache.client.http_client import HttpSearchClient, normalize_search_payload

BASE_URL = "http://api.test/api"


def _client(handler) -> HttpSearchClient:
    transport = httpx.MockTransport(handler)
    http = httpx.AsyncClient(base_url=BASE_URL, transport=transport)
    return HttpSearchClient(base_url=BASE_URL, client=http)


class TestBaseSearchClient:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseSearchClient()  # type: ignore[abstract]

    def test_error_carries_status(self):
        err = SearchApiError("Not found", status_code=404)
        assert err.status_code == 404
        assert str(err) == "Not found"


class TestSuggestions:
    @pytest.mark.asyncio
    async def test_parses_data_list(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={
                "success": True,
                "data": [
                    {"type": "product", "text": "Running shoes", "value": "p-101"},
                    {"type": "category", "text": "Shoes", "value": "c-7"},
                ],
            })

        client = _client(handler)
        items = await client.get_suggestions(" sho ", limit=6)
        await client.aclose()

        assert [i.text for i in items] == ["Running shoes", "Shoes"]
        assert seen[0].url.path == "/api/search/suggestions"
        assert seen[0].url.params["q"] == "sho"
        assert seen[0].url.params["limit"] == "6"

    @pytest.mark.asyncio
    async def test_short_query_skips_network(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("network must not be called")

        client = _client(handler)
        assert await client.get_suggestions("s") == []

    @pytest.mark.asyncio
    async def test_malformed_items_skipped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [
                {"type": "product", "text": "Running shoes", "value": "p-101"},
                {"type": "unknown", "text": "?", "value": "x"},
                {"text": "missing type"},
            ]})

        items = await _client(handler).get_suggestions("sho")
        assert len(items) == 1

    @pytest.mark.asyncio
    async def test_bare_list_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[
                {"type": "enterprise", "text": "Shoe Palace", "value": "e-3"},
            ])

        items = await _client(handler).get_suggestions("sho")
        assert items[0].type == "enterprise"


class TestSearch:
    @pytest.mark.asyncio
    async def test_sends_filters_as_params(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={
                "success": True,
                "data": [{"id": "p1"}],
                "searchInfo": {"query": "shoes", "totalResults": 41, "searchTime": 18},
            })

        client = _client(handler)
        response = await client.search(
            "shoes",
            {"city": "Douala", "inStock": True, "minPrice": None, "brand": "", "page": 2},
        )

        params = seen[0].url.params
        assert seen[0].url.path == "/api/search/products"
        assert params["q"] == "shoes"
        assert params["city"] == "Douala"
        assert params["inStock"] == "true"
        assert params["page"] == "2"
        assert "minPrice" not in params
        assert "brand" not in params
        assert response.results == [{"id": "p1"}]
        assert response.meta is not None
        assert response.meta.total_results == 41
        assert response.meta.search_time_ms == 18

    @pytest.mark.asyncio
    async def test_http_error_uses_body_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"success": False, "message": "Maintenance"})

        with pytest.raises(SearchApiError, match="Maintenance") as exc_info:
            await _client(handler).search("shoes")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_http_error_without_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="oops")

        with pytest.raises(SearchApiError, match="HTTP 500"):
            await _client(handler).search("shoes")

    @pytest.mark.asyncio
    async def test_success_false_is_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "message": "Bad query"})

        with pytest.raises(SearchApiError, match="Bad query"):
            await _client(handler).search("shoes")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(SearchApiError, match="Invalid JSON"):
            await _client(handler).search("shoes")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(SearchApiError, match="timed out"):
            await _client(handler).search("shoes")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SearchApiError, match="failed"):
            await _client(handler).search("shoes")


class TestNormalizeSearchPayload:
    def test_products_with_pagination(self):
        payload = {"products": [{"id": 1}, {"id": 2}], "pagination": {"total": 57, "page": 1}}
        response = normalize_search_payload(payload, "bags")
        assert len(response.results) == 2
        assert response.meta is not None
        assert response.meta.total_results == 57
        assert response.meta.query == "bags"

    def test_search_info_keeps_extra_fields(self):
        payload = {"data": [], "searchInfo": {"totalResults": 0, "suggestedQuery": "bag"}}
        response = normalize_search_payload(payload)
        assert response.meta is not None
        assert response.meta.model_extra == {"suggestedQuery": "bag"}

    def test_bare_list(self):
        response = normalize_search_payload([{"id": 1}])
        assert response.results == [{"id": 1}]
        assert response.meta is None

    def test_unexpected_shape(self):
        response = normalize_search_payload("nope")
        assert response.results == []

    def test_search_time_alias(self):
        payload = json.loads('{"data": [{"id": "x"}], "searchInfo": {"searchTime": 3}}')
        assert normalize_search_payload(payload).meta.search_time_ms == 3
