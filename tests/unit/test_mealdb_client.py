from __future__ import annotations

from typing import Callable

import httpx
import pytest

from src.services.errors import UpstreamRequestError, UpstreamStatusError, UpstreamTimeoutError
from src.services.mealdb_client import MealDbClient

BASE_URL = "https://mealdb.test/api/json/v1/1"


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> MealDbClient:
    return MealDbClient(base_url=BASE_URL, timeout=2.0, transport=httpx.MockTransport(handler))


class TestMealDbClientRequests:
    @pytest.mark.asyncio
    async def test_lookup_by_id_returns_first_meal(self) -> None:
        seen: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, json={"meals": [{"idMeal": "52771", "strMeal": "Arrabiata"}]})

        client = _client(handler)
        meal = await client.lookup_by_id("52771")
        await client.aclose()

        assert meal == {"idMeal": "52771", "strMeal": "Arrabiata"}
        assert seen[0].path == "/api/json/v1/1/lookup.php"
        assert seen[0].params["i"] == "52771"

    @pytest.mark.asyncio
    async def test_lookup_miss_returns_none(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"meals": None}))
        assert await client.lookup_by_id("0") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_search_endpoints_use_expected_params(self) -> None:
        seen: list[tuple[str, dict[str, str]]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.path.rsplit("/", 1)[-1], dict(request.url.params)))
            return httpx.Response(200, json={"meals": [{"idMeal": "1"}]})

        client = _client(handler)
        await client.search_by_name("arrabiata")
        await client.filter_by_category("pasta")
        await client.search_by_prefix("a")
        await client.aclose()

        assert seen == [
            ("search.php", {"s": "arrabiata"}),
            ("filter.php", {"c": "pasta"}),
            ("search.php", {"f": "a"}),
        ]

    @pytest.mark.asyncio
    async def test_null_meals_is_empty_list(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"meals": None}))
        assert await client.search_by_name("nothing") == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_non_dict_entries_are_dropped(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"meals": [{"idMeal": "1"}, "junk", None]}))
        assert await client.search_by_prefix("b") == [{"idMeal": "1"}]
        await client.aclose()


class TestMealDbClientErrors:
    @pytest.mark.asyncio
    async def test_error_status_raises_status_error(self) -> None:
        client = _client(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(UpstreamStatusError) as exc_info:
            await client.search_by_name("arrabiata")
        await client.aclose()

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_invalid_json_raises_status_error(self) -> None:
        client = _client(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(UpstreamStatusError):
            await client.search_by_name("arrabiata")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_raises_timeout_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client(handler)
        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await client.lookup_by_id("52771")
        await client.aclose()

        assert exc_info.value.timeout_seconds == 2.0

    @pytest.mark.asyncio
    async def test_connection_failure_counts_as_no_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(UpstreamTimeoutError):
            await client.filter_by_category("pasta")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_request_setup_failure_raises_request_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.UnsupportedProtocol("unsupported scheme", request=request)

        client = _client(handler)
        with pytest.raises(UpstreamRequestError):
            await client.search_by_prefix("a")
        await client.aclose()
