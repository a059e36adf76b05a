"""HTTP client for the upstream exchange odds API."""

from __future__ import annotations

import logging

import httpx

from .interface import OddsSource, RawPayload

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
)


class HttpOddsSource(OddsSource):
    """OddsSource backed by the exchange REST API.

    Endpoints:
      - GET {base}/exchange/odds/eventType/{typeId}            (all markets of a sport)
      - GET {base}/exchange/odds/d-sma-event/{typeId}/{eventId} (one event)

    Every request carries the same fixed headers and a timeout so a hung
    upstream cannot stall a push cycle indefinitely. There are no retries.
    """

    def __init__(
        self,
        base_url: str,
        auth_token: str = "",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            headers=self._headers(auth_token),
            timeout=timeout,
            transport=transport,
        )

    async def fetch_sport(self, type_id: str) -> RawPayload | None:
        return await self.fetch(f"{self._base_url}/exchange/odds/eventType/{type_id}")

    async def fetch_event(self, type_id: str, event_id: str) -> RawPayload | None:
        return await self.fetch(f"{self._base_url}/exchange/odds/d-sma-event/{type_id}/{event_id}")

    async def fetch(self, url: str) -> RawPayload | None:
        """GET a fully-formed URL. Returns the decoded JSON body, or None on any failure."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Upstream request failed: %s -> HTTP %d", url, e.response.status_code)
        except httpx.HTTPError as e:
            logger.warning("Upstream request failed: %s (%s)", url, e.__class__.__name__)
        except ValueError as e:
            logger.warning("Upstream returned invalid JSON: %s (%s)", url, e)
        return None

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _headers(auth_token: str) -> dict[str, str]:
        headers = {
            "accept": "application/json, text/plain, */*",
            "accept-language": "en-US,en;q=0.9",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        if auth_token:
            headers["authorization"] = auth_token
        return headers
