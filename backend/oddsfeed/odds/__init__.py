"""Odds data subsystem for Odds Feed.

Public API:
    Sport, Competition, Match, Market, Runner - Normalized odds model
    SPORTS              - Fixed table of supported sports
    OddsSource          - Abstract interface for upstream providers
    create_odds_source  - Factory that selects the live API or sample files
    PayloadCache        - Time-windowed cache of transformed payloads
    OddsService         - Cached fetch-and-transform of sport/event odds
    ConnectionRegistry  - Per-connection subscription records
    create_odds_router  - FastAPI router factory for REST endpoints
    create_stream_router - FastAPI router factory for the WebSocket endpoint
"""

from .cache import PayloadCache
from .factory import create_odds_source
from .interface import OddsSource
from .models import Competition, Market, Match, Runner, Sport
from .routes import create_odds_router
from .service import OddsService
from .sports import SPORTS
from .stream import create_stream_router
from .subscriptions import ConnectionRegistry

__all__ = [
    "Sport",
    "Competition",
    "Match",
    "Market",
    "Runner",
    "SPORTS",
    "OddsSource",
    "create_odds_source",
    "PayloadCache",
    "OddsService",
    "ConnectionRegistry",
    "create_odds_router",
    "create_stream_router",
]
