"""FatSecret Platform API client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from nutrisnap.services.cache import Cache

_TOKEN_CACHE_KEY = "fatsecret:access_token"
_TOKEN_SAFETY_MARGIN_SECONDS = 60

_logger = logging.getLogger(__name__)


class FatSecretClient(Protocol):
    """Interface for FatSecret API interactions."""

    async def search_foods(self, query: str, max_results: int = 5) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, food_id: str) -> dict[str, object]:
        """Fetch a food by FatSecret id and return raw API data."""


@dataclass
class HttpxFatSecretClient(FatSecretClient):
    """HTTPX-backed FatSecret client using OAuth2 client credentials."""

    client_id: str
    client_secret: str
    token_url: str
    api_url: str
    http_client: httpx.AsyncClient
    token_cache: Cache

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        client_id: str,
        client_secret: str,
        token_url: str,
        api_url: str,
        token_cache: Cache,
    ) -> "HttpxFatSecretClient":
        """Create a FatSecret client with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            token_url=token_url,
            api_url=api_url,
            http_client=httpx.AsyncClient(),
            token_cache=token_cache,
        )

    async def access_token(self) -> str:
        """Return a cached access token, requesting a new one when expired."""
        cached = self.token_cache.get(_TOKEN_CACHE_KEY)
        if isinstance(cached, str):
            return cached

        response = await self.http_client.post(
            self.token_url,
            data={
                "grant_type": "client_credentials",
                "scope": "basic",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            timeout=15,
        )
        response.raise_for_status()
        payload = response.json()
        token = str(payload["access_token"])
        expires_in = float(payload.get("expires_in", 0))
        self.token_cache.set(
            _TOKEN_CACHE_KEY,
            token,
            ttl_seconds=expires_in - _TOKEN_SAFETY_MARGIN_SECONDS,
        )
        _logger.info("Obtained FatSecret access token (expires_in=%s)", expires_in)
        return token

    async def search_foods(self, query: str, max_results: int = 5) -> dict[str, object]:
        """Search foods by query."""
        return await self._call(
            {
                "method": "foods.search",
                "search_expression": query,
                "max_results": str(max_results),
                "format": "json",
            }
        )

    async def get_food(self, food_id: str) -> dict[str, object]:
        """Fetch a food by FatSecret id."""
        return await self._call(
            {
                "method": "food.get.v2",
                "food_id": food_id,
                "format": "json",
                "include_sub_categories": "true",
            }
        )

    async def _call(self, form: dict[str, str]) -> dict[str, object]:
        token = await self.access_token()
        response = await self.http_client.post(
            self.api_url,
            data=form,
            headers={"Authorization": f"Bearer {token}"},
            timeout=15,
        )
        if response.status_code == httpx.codes.UNAUTHORIZED:
            self.token_cache.delete(_TOKEN_CACHE_KEY)
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
