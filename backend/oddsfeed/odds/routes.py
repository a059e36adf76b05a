"""REST endpoints for sports, sport odds and event odds."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from .service import OddsService


def create_odds_router(service: OddsService, require_identity: Callable) -> APIRouter:
    """Create the odds router. Every route requires a verified identity."""
    router = APIRouter(prefix="/api", tags=["odds"], dependencies=[Depends(require_identity)])

    @router.get("/sports")
    async def list_sports() -> dict:
        return {"success": True, "sports": service.list_sports()}

    @router.get("/sport/{sport_name}")
    async def get_sport(sport_name: str) -> JSONResponse:
        return _respond(await service.get_sport_data(sport_name))

    @router.get("/event/{sport_name}/{event_id}")
    async def get_event(sport_name: str, event_id: str) -> JSONResponse:
        return _respond(await service.get_event_data(sport_name, event_id))

    return router


def _respond(payload: dict) -> JSONResponse:
    status_code = 200 if payload.get("success") else 500
    return JSONResponse(status_code=status_code, content=payload)
