"""Application factory and entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import AuthService, UserStore, create_auth_router, create_identity_dependency
from .config import Settings, load_settings
from .errors import ApiError, api_error_handler
from .odds import (
    ConnectionRegistry,
    OddsService,
    OddsSource,
    PayloadCache,
    create_odds_router,
    create_odds_source,
    create_stream_router,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, source: OddsSource | None = None) -> FastAPI:
    """Wire the odds service, auth and routers into a FastAPI app.

    ``source`` overrides the odds source chosen from settings (used by tests).
    Users are loaded and the seed admin created on startup; on shutdown every
    stream connection is closed before the source is released.
    """
    settings = settings or load_settings()
    if source is None:
        source = create_odds_source(settings)

    service = OddsService(
        source,
        sport_cache=PayloadCache(ttl=settings.sport_cache_ttl),
        event_cache=PayloadCache(ttl=settings.event_cache_ttl),
    )
    users = UserStore(settings.users_file, bcrypt_rounds=settings.bcrypt_rounds)
    auth = AuthService(
        users,
        secret=settings.jwt_secret,
        token_ttl=timedelta(hours=settings.token_ttl_hours),
        max_devices=settings.max_devices_per_user,
    )
    registry = ConnectionRegistry(
        service,
        sport_interval=settings.sport_push_interval,
        event_interval=settings.event_push_interval,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await users.load(settings.admin_username, settings.admin_password)
        logger.info("Odds Feed ready on port %d", settings.port)
        yield
        await registry.close_all()
        await source.close()
        logger.info("Odds Feed stopped")

    app = FastAPI(title="Odds Feed", lifespan=lifespan)
    if settings.frontend_url:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.frontend_url],
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["*"],
        )
    app.add_exception_handler(ApiError, api_error_handler)

    require_identity = create_identity_dependency(auth)
    app.include_router(create_auth_router(auth))
    app.include_router(create_odds_router(service, require_identity))
    app.include_router(create_stream_router(registry, auth))

    @app.get("/health", tags=["ops"])
    async def health() -> dict:
        return {"status": "ok", "connections": len(registry)}

    app.state.settings = settings
    app.state.odds_service = service
    app.state.auth = auth
    app.state.registry = registry
    return app


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
