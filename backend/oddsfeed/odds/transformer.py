"""Reshape raw upstream exchange payloads into the normalized odds schema.

Everything here is pure: no I/O and no shared state. Failures are reported as
``{"success": False, "message": ..., "sport": ...}`` payloads and never raised.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from .models import Competition, Market, Match, PriceLevel, Runner, now_millis
from .sports import sport_tag

logger = logging.getLogger(__name__)

MATCH_ODDS = "Match Odds"
TIED_MATCH = "Tied Match"
OVER_UNDER = "Over/Under"
SET = "Set"
GAME = "Game"


def transform_sport_data(raw: Any, sport_name: str, timestamp: int | None = None) -> dict:
    """Group a flat list of market records into competitions and matches.

    Markets without an ``event.id`` are dropped. A competition is created for
    every distinct competition id that also carries a name; matches without
    one are kept under ``ungroupedMatches``. Competitions are sorted by name,
    case-insensitively.
    """
    if not isinstance(raw, dict) or raw.get("result") is None:
        return _failure("Invalid data format", sport_name)

    try:
        matches: dict[Any, Match] = {}
        competitions: dict[Any, Competition] = {}

        for record in raw["result"]:
            event = record.get("event") or {}
            event_id = event.get("id")
            if not event_id:
                continue

            competition = record.get("competition") or {}
            competition_id = competition.get("id")
            competition_name = competition.get("name")
            if competition_id and competition_name and competition_id not in competitions:
                competitions[competition_id] = Competition(id=competition_id, name=competition_name)

            match = matches.get(event_id)
            if match is None:
                match = Match(
                    id=event_id,
                    name=event.get("name"),
                    sport=sport_name,
                    venue=event.get("venue"),
                    start_time=parse_start_time(event.get("openDate"), record.get("start")),
                    in_play=bool(record.get("inPlay")),
                    competition_id=competition_id,
                    competition=competition_name,
                )
                matches[event_id] = match
                if competition_id in competitions:
                    competitions[competition_id].match_ids.append(event_id)

            market = transform_market(record)
            if market is not None:
                match.markets.append(market)

        ordered = sorted(competitions.values(), key=lambda c: str(c.name).casefold())
        grouped_ids = {match_id for comp in ordered for match_id in comp.match_ids}

        return {
            "success": True,
            "sport": sport_name,
            "competitions": [comp.to_dict(matches) for comp in ordered],
            "ungroupedMatches": [
                match.to_dict() for match_id, match in matches.items() if match_id not in grouped_ids
            ],
            "matchCount": len(matches),
            "timestamp": timestamp if timestamp is not None else now_millis(),
        }
    except Exception as e:
        logger.exception("Error transforming %s data", sport_name)
        return _failure(f"Error transforming {sport_name} data: {e}", sport_name)


def transform_event_data(raw: Any, sport_name: str, timestamp: int | None = None) -> dict:
    """Describe a single event and bucket its markets by name.

    The first record's event block is taken as the event descriptor. Buckets
    are mutually exclusive and assigned in priority order: exact "Match Odds",
    exact "Tied Match", then "Over/Under", "Set" and "Game" substrings, then
    everything else.
    """
    if not isinstance(raw, dict) or raw.get("result") is None:
        return _failure("Invalid event data format", sport_name)

    try:
        records = raw["result"]
        first = records[0] if records else {}
        event = first.get("event") or {}
        competition = first.get("competition") or {}

        markets = [m for m in (transform_market(record) for record in records) if m is not None]

        return {
            "success": True,
            "sport": sport_name,
            "event": {
                "id": event.get("id"),
                "name": event.get("name"),
                "venue": event.get("venue"),
                "startTime": parse_start_time(event.get("openDate"), first.get("start")),
                "inPlay": bool(first.get("inPlay")),
                "competition": competition.get("name"),
                "competitionId": competition.get("id"),
            },
            "markets": [market.to_dict() for market in markets],
            "groupedMarkets": group_markets(markets),
            "timestamp": timestamp if timestamp is not None else now_millis(),
        }
    except Exception as e:
        logger.exception("Error transforming event data for %s", sport_name)
        return _failure(f"Error transforming event data: {e}", sport_name)


def transform_market(market: Any) -> Market | None:
    """Map one upstream market record. Returns None for records without runners."""
    if not isinstance(market, dict) or market.get("runners") is None:
        return None

    try:
        return Market(
            id=market.get("id"),
            name=market.get("name"),
            status=market.get("status"),
            in_play=bool(market.get("inPlay")),
            total_matched=market.get("matched"),
            num_winners=market.get("numWinners"),
            start=market.get("start"),
            market_type=market.get("mtype"),
            sport=sport_tag(market.get("eventTypeId")),
            runners=tuple(_transform_runner(runner) for runner in market["runners"]),
        )
    except (AttributeError, TypeError) as e:
        logger.warning("Skipping market %s: %s", market.get("id"), e)
        return None


def group_markets(markets: list[Market]) -> dict:
    """Assign each market to exactly one named bucket."""
    grouped: dict[str, Any] = {
        "matchOdds": None,
        "tiedMatch": None,
        "overUnderMarkets": [],
        "setMarkets": [],
        "gameMarkets": [],
        "otherMarkets": [],
    }
    for market in markets:
        name = market.name or ""
        if name == MATCH_ODDS:
            if grouped["matchOdds"] is None:
                grouped["matchOdds"] = market.to_dict()
        elif name == TIED_MATCH:
            if grouped["tiedMatch"] is None:
                grouped["tiedMatch"] = market.to_dict()
        elif OVER_UNDER in name:
            grouped["overUnderMarkets"].append(market.to_dict())
        elif SET in name:
            grouped["setMarkets"].append(market.to_dict())
        elif GAME in name:
            grouped["gameMarkets"].append(market.to_dict())
        else:
            grouped["otherMarkets"].append(market.to_dict())
    return grouped


def parse_start_time(open_date: Any, fallback: Any = None) -> Any:
    """Convert an ``openDate`` (ISO string or epoch millis) to epoch millis.

    Returns ``fallback`` when the value is missing or cannot be parsed.
    """
    if open_date is None or open_date == "" or isinstance(open_date, bool):
        return fallback
    if isinstance(open_date, (int, float)):
        return int(open_date)

    text = str(open_date).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


# --- Internal ---


def _transform_runner(runner: dict) -> Runner:
    return Runner(
        id=runner.get("id"),
        name=runner.get("name"),
        status=runner.get("status"),
        sort_priority=runner.get("sort"),
        handicap=runner.get("hdp"),
        last_price_traded=runner.get("lastPriceTraded"),
        total_matched=runner.get("totalMatched"),
        back_prices=_ladder(runner.get("back")),
        lay_prices=_ladder(runner.get("lay")),
    )


def _ladder(levels: list | None) -> tuple[PriceLevel, ...]:
    if not levels:
        return ()
    return tuple(PriceLevel(price=level.get("price"), size=level.get("size")) for level in levels)


def _failure(message: str, sport_name: str) -> dict:
    return {"success": False, "message": message, "sport": sport_name}
