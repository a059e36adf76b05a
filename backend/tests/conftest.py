"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from oddsfeed.odds.interface import OddsSource


class FakeOddsSource(OddsSource):
    """In-memory OddsSource that records every call."""

    def __init__(self, sport_payload: Any = None, event_payload: Any = None) -> None:
        self.sport_payload = sport_payload
        self.event_payload = event_payload
        self.sport_calls: list[str] = []
        self.event_calls: list[tuple[str, str]] = []
        self.closed = False

    async def fetch_sport(self, type_id: str):
        self.sport_calls.append(type_id)
        return self.sport_payload

    async def fetch_event(self, type_id: str, event_id: str):
        self.event_calls.append((type_id, event_id))
        return self.event_payload

    async def close(self) -> None:
        self.closed = True


def build_market(
    market_id: str = "1.100",
    name: str = "Match Odds",
    event_id: str | None = "E1",
    event_name: str = "India v Australia",
    competition: tuple[str, str] | None = ("C1", "Indian Premier League"),
    event_type_id: str = "4",
    in_play: bool = False,
    open_date: str | None = "2025-03-20T14:00:00.000Z",
    runners: list[dict] | None = None,
) -> dict:
    """A raw upstream market record shaped like the exchange API returns it."""
    market: dict[str, Any] = {
        "id": market_id,
        "name": name,
        "status": "OPEN",
        "inPlay": in_play,
        "matched": 1520.5,
        "numWinners": 1,
        "start": 1742479200000,
        "mtype": "MATCH_ODDS",
        "eventTypeId": event_type_id,
        "runners": runners
        if runners is not None
        else [
            {
                "id": 101,
                "name": "India",
                "status": "ACTIVE",
                "sort": 1,
                "hdp": 0,
                "lastPriceTraded": 1.85,
                "totalMatched": 900.0,
                "back": [{"price": 1.84, "size": 120.0}, {"price": 1.83, "size": 60.0}],
                "lay": [{"price": 1.86, "size": 75.0}],
            }
        ],
    }
    if event_id is not None:
        market["event"] = {"id": event_id, "name": event_name, "venue": "Mumbai", "openDate": open_date}
    if competition is not None:
        market["competition"] = {"id": competition[0], "name": competition[1]}
    return market


@pytest.fixture
def event_loop_policy():
    """Use the default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture
def make_market():
    return build_market


@pytest.fixture
def fake_source() -> FakeOddsSource:
    return FakeOddsSource(
        sport_payload={"result": [build_market()]},
        event_payload={"result": [build_market()]},
    )
