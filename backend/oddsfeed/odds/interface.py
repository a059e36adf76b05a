"""Abstract interface for upstream odds sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

RawPayload = dict[str, Any]


class OddsSource(ABC):
    """Contract for odds providers.

    Sources return the provider's raw JSON untouched; shaping it is the
    transformer's job and deduplicating calls is the cache's. A source never
    raises for a failed fetch. It logs and returns None, and callers try
    again on their next cycle.

    Lifecycle:
        source = create_odds_source(settings)
        raw = await source.fetch_sport("4")
        raw = await source.fetch_event("4", "33012345")
        # ... app shutting down ...
        await source.close()
    """

    @abstractmethod
    async def fetch_sport(self, type_id: str) -> RawPayload | None:
        """Fetch every market for a sport type code, or None on failure."""

    @abstractmethod
    async def fetch_event(self, type_id: str, event_id: str) -> RawPayload | None:
        """Fetch every market for a single event, or None on failure."""

    async def close(self) -> None:
        """Release network resources. Safe to call multiple times."""
