"""Data models for normalized odds data."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Sport:
    """A supported sport and the type code the upstream provider uses for it."""

    id: str
    name: str
    type_id: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "typeId": self.type_id}


@dataclass(frozen=True, slots=True)
class PriceLevel:
    """One rung of a back or lay ladder."""

    price: Any
    size: Any

    def to_dict(self) -> dict:
        return {"price": self.price, "size": self.size}


@dataclass(frozen=True, slots=True)
class Runner:
    """A selectable outcome within a market, with its back/lay ladders."""

    id: Any
    name: str | None
    status: str | None = None
    sort_priority: Any = None
    handicap: Any = None
    last_price_traded: Any = None
    total_matched: Any = None
    back_prices: tuple[PriceLevel, ...] = ()
    lay_prices: tuple[PriceLevel, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "sortPriority": self.sort_priority,
            "handicap": self.handicap,
            "lastPriceTraded": self.last_price_traded,
            "totalMatched": self.total_matched,
            "backPrices": [level.to_dict() for level in self.back_prices],
            "layPrices": [level.to_dict() for level in self.lay_prices],
        }


@dataclass(frozen=True, slots=True)
class Market:
    """A single bettable proposition, e.g. the match winner."""

    id: Any
    name: str | None
    status: str | None = None
    in_play: bool = False
    total_matched: Any = None
    num_winners: Any = None
    start: Any = None
    market_type: Any = None
    sport: str = "unknown"
    runners: tuple[Runner, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "inPlay": self.in_play,
            "totalMatched": self.total_matched,
            "numWinners": self.num_winners,
            "start": self.start,
            "marketType": self.market_type,
            "sport": self.sport,
            "runners": [runner.to_dict() for runner in self.runners],
        }


@dataclass(slots=True)
class Match:
    """An event with its markets. Markets are appended while a payload is grouped."""

    id: Any
    name: str | None
    sport: str
    venue: str | None = None
    start_time: Any = None  # Epoch millis when known
    in_play: bool = False
    competition_id: Any = None
    competition: str | None = None
    markets: list[Market] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "venue": self.venue,
            "startTime": self.start_time,
            "inPlay": self.in_play,
            "sport": self.sport,
            "competitionId": self.competition_id,
            "competition": self.competition,
            "markets": [market.to_dict() for market in self.markets],
        }


@dataclass(slots=True)
class Competition:
    """A competition and the ids of its matches, in first-seen order."""

    id: Any
    name: str
    match_ids: list[Any] = field(default_factory=list)

    def to_dict(self, matches: dict[Any, Match]) -> dict:
        """Serialize with each match id expanded to the full match."""
        return {
            "id": self.id,
            "name": self.name,
            "matches": [matches[match_id].to_dict() for match_id in self.match_ids],
        }


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)
