# src/services/mealdb_client.py
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .errors import UpstreamRequestError, UpstreamStatusError, UpstreamTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.themealdb.com/api/json/v1/1"
DEFAULT_TIMEOUT_SECONDS = 15.0


class MealDbClient:
    """
    Async client for TheMealDB JSON API.

    Every call is bounded by `timeout` and performed once. Failures are raised as
    UpstreamStatusError (error status or unusable body), UpstreamTimeoutError
    (no response) or UpstreamRequestError (request could not be built or sent).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def lookup_by_id(self, provider_id: str) -> Optional[dict[str, Any]]:
        meals = await self._get_meals("/lookup.php", {"i": provider_id})
        return meals[0] if meals else None

    async def search_by_name(self, query: str) -> list[dict[str, Any]]:
        return await self._get_meals("/search.php", {"s": query})

    async def filter_by_category(self, category: str) -> list[dict[str, Any]]:
        return await self._get_meals("/filter.php", {"c": category})

    async def search_by_prefix(self, letter: str) -> list[dict[str, Any]]:
        return await self._get_meals("/search.php", {"f": letter})

    async def _get_meals(self, path: str, params: dict[str, str]) -> list[dict[str, Any]]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._get_client().get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            logger.warning("Upstream error status %s for %s %s", error.response.status_code, path, params)
            raise UpstreamStatusError(url, error.response.status_code) from error
        except httpx.TimeoutException as error:
            logger.warning("Upstream timeout for %s %s", path, params)
            raise UpstreamTimeoutError(url, self.timeout) from error
        except (httpx.NetworkError, httpx.RemoteProtocolError) as error:
            logger.warning("No response from upstream for %s %s: %s", path, params, error)
            raise UpstreamTimeoutError(url, self.timeout) from error
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            logger.error("Failed to send upstream request %s %s: %s", path, params, error)
            raise UpstreamRequestError(url, str(error)) from error

        try:
            payload = response.json()
        except ValueError as error:
            raise UpstreamStatusError(url, response.status_code, "Upstream returned invalid JSON") from error

        return _meals_from_payload(payload)


def _meals_from_payload(payload: Any) -> list[dict[str, Any]]:
    # The API answers {"meals": null} when nothing matches
    if not isinstance(payload, dict):
        return []
    meals = payload.get("meals")
    if not isinstance(meals, list):
        return []
    return [meal for meal in meals if isinstance(meal, dict)]
