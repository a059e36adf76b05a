"""Tests for HttpOddsSource (mocked transport)."""

import httpx
import pytest

from oddsfeed.odds.upstream import HttpOddsSource


def _source(handler, token: str = "secret-token") -> HttpOddsSource:
    return HttpOddsSource(
        base_url="https://odds.example/api/",
        auth_token=token,
        timeout=2.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
class TestHttpOddsSource:
    """Unit tests for the upstream HTTP client."""

    async def test_sport_endpoint_and_headers(self):
        """Test that the sport URL and fixed headers are used."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"result": []})

        source = _source(handler)
        result = await source.fetch_sport("4")
        await source.close()

        assert result == {"result": []}
        assert str(seen[0].url) == "https://odds.example/api/exchange/odds/eventType/4"
        assert seen[0].headers["authorization"] == "secret-token"
        assert seen[0].headers["accept"].startswith("application/json")

    async def test_event_endpoint(self):
        """Test that the event URL includes type code and event id."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"result": [{"id": "1.1"}]})

        source = _source(handler)
        result = await source.fetch_event("2", "33012345")
        await source.close()

        assert result == {"result": [{"id": "1.1"}]}
        assert seen == ["https://odds.example/api/exchange/odds/d-sma-event/2/33012345"]

    async def test_no_authorization_header_without_token(self):
        """Test that an empty token sends no authorization header."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        source = _source(handler, token="")
        await source.fetch_sport("1")
        await source.close()

        assert "authorization" not in seen[0].headers

    async def test_non_2xx_returns_none(self):
        """Test that HTTP errors are logged and reported as no data."""
        source = _source(lambda request: httpx.Response(503, text="maintenance"))
        assert await source.fetch_sport("4") is None
        await source.close()

    async def test_transport_error_returns_none(self):
        """Test that network errors never propagate."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        source = _source(handler)
        assert await source.fetch_sport("4") is None
        await source.close()

    async def test_timeout_returns_none(self):
        """Test that timeouts are treated as no data."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        source = _source(handler)
        assert await source.fetch("https://odds.example/api/anything") is None
        await source.close()

    async def test_invalid_json_returns_none(self):
        """Test that an undecodable body is treated as no data."""
        source = _source(lambda request: httpx.Response(200, text="<html>oops</html>"))
        assert await source.fetch_sport("4") is None
        await source.close()

    async def test_close_is_idempotent(self):
        """Test that close() can be called twice."""
        source = _source(lambda request: httpx.Response(200, json={}))
        await source.close()
        await source.close()  # Should not raise
