"""Cached fetch-and-transform of sport and event odds."""

from __future__ import annotations

import logging

from .cache import Payload, PayloadCache
from .interface import OddsSource
from .sports import SPORTS, resolve_sport
from .transformer import transform_event_data, transform_sport_data

logger = logging.getLogger(__name__)

SPORT_CACHE_TTL = 5 * 60.0
EVENT_CACHE_TTL = 10.0


class OddsService:
    """Single entry point for odds payloads, used by REST routes and push cycles.

    Sport payloads are cached per sport name, event payloads per
    (sport name, event id). Both caches are injected so tests can share or
    inspect them.
    """

    def __init__(
        self,
        source: OddsSource,
        sport_cache: PayloadCache | None = None,
        event_cache: PayloadCache | None = None,
    ) -> None:
        self._source = source
        self.sport_cache = sport_cache if sport_cache is not None else PayloadCache(ttl=SPORT_CACHE_TTL)
        self.event_cache = event_cache if event_cache is not None else PayloadCache(ttl=EVENT_CACHE_TTL)

    @staticmethod
    def list_sports() -> list[dict]:
        return [sport.to_dict() for sport in SPORTS]

    async def get_sport_data(self, sport_name: str) -> Payload:
        """Transformed payload for every match of a sport, or a failure payload."""
        sport = resolve_sport(sport_name)
        key = sport_name.strip().lower()

        async def load() -> Payload | None:
            raw = await self._source.fetch_sport(sport.type_id)
            if raw is None:
                return None
            return transform_sport_data(raw, sport_name)

        return await self.sport_cache.get_or_fetch(
            key, load, failure_message=f"Failed to fetch {sport_name} data"
        )

    async def get_event_data(self, sport_name: str, event_id: str) -> Payload:
        """Transformed payload for a single event, or a failure payload."""
        sport = resolve_sport(sport_name)
        key = (sport_name.strip().lower(), str(event_id))

        async def load() -> Payload | None:
            raw = await self._source.fetch_event(sport.type_id, str(event_id))
            if raw is None:
                return None
            return transform_event_data(raw, sport_name)

        return await self.event_cache.get_or_fetch(
            key, load, failure_message=f"Failed to fetch event data for {event_id}"
        )
