"""Tests for HTTP-based adapters."""

import asyncio
from collections.abc import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from nutrisnap.adapters.fatsecret_client import HttpxFatSecretClient
from nutrisnap.services.cache import InMemoryCache

TOKEN_URL = "https://oauth.fatsecret.com/connect/token"
API_URL = "https://platform.fatsecret.com/rest/server.api"


def _form(request: httpx.Request) -> dict[str, str]:
    parsed = parse_qs(request.content.decode())
    return {key: values[0] for key, values in parsed.items()}


def _client(
    handler: Callable[[httpx.Request], httpx.Response], cache: InMemoryCache
) -> HttpxFatSecretClient:
    return HttpxFatSecretClient(
        client_id="client-id",
        client_secret="client-secret",
        token_url=TOKEN_URL,
        api_url=API_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        token_cache=cache,
    )


def test_fatsecret_client_reuses_token() -> None:
    token_requests: list[dict[str, str]] = []
    api_requests: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            token_requests.append(_form(request))
            return httpx.Response(
                200, json={"access_token": "tok", "expires_in": 86400}
            )
        assert request.headers["Authorization"] == "Bearer tok"
        api_requests.append(_form(request))
        return httpx.Response(200, json={"foods": {"food": []}})

    cache = InMemoryCache()
    client = _client(handler, cache)

    async def run() -> None:
        await client.search_foods("rice", max_results=3)
        await client.get_food("4881")
        await client.close()

    asyncio.run(run())

    assert len(token_requests) == 1
    assert token_requests[0]["grant_type"] == "client_credentials"
    assert token_requests[0]["scope"] == "basic"
    assert api_requests[0]["method"] == "foods.search"
    assert api_requests[0]["search_expression"] == "rice"
    assert api_requests[0]["max_results"] == "3"
    assert api_requests[1]["method"] == "food.get.v2"
    assert api_requests[1]["food_id"] == "4881"
    assert cache.get("fatsecret:access_token") == "tok"


def test_fatsecret_client_drops_token_on_unauthorized() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            return httpx.Response(
                200, json={"access_token": "stale", "expires_in": 3600}
            )
        return httpx.Response(401, json={"error": "invalid token"})

    cache = InMemoryCache()
    client = _client(handler, cache)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("rice"))

    assert cache.get("fatsecret:access_token") is None


def test_short_lived_token_is_not_cached() -> None:
    token_calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal token_calls
        if str(request.url) == TOKEN_URL:
            token_calls += 1
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 30})
        return httpx.Response(200, json={"food": {}})

    client = _client(handler, InMemoryCache())

    async def run() -> None:
        await client.get_food("1")
        await client.get_food("2")

    asyncio.run(run())

    assert token_calls == 2
