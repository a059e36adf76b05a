"""Process configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_UPSTREAM_BASE_URL = "https://gobook9.com/api"


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable runtime settings. Build with load_settings() or directly in tests."""

    host: str = "0.0.0.0"
    port: int = 7000
    log_level: str = "INFO"
    frontend_url: str = ""

    upstream_base_url: str = DEFAULT_UPSTREAM_BASE_URL
    upstream_auth_token: str = ""
    upstream_timeout: float = 5.0
    sample_data_dir: str = ""

    jwt_secret: str = "change-me"
    token_ttl_hours: int = 24
    users_file: Path = Path("data/users.json")
    max_devices_per_user: int = 2
    bcrypt_rounds: int = 10
    admin_username: str = ""
    admin_password: str = ""

    sport_push_interval: float = 5.0
    event_push_interval: float = 1.0
    sport_cache_ttl: float = 300.0
    event_cache_ttl: float = 10.0


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults for anything unset."""
    env = os.environ
    defaults = Settings()
    return Settings(
        host=env.get("HOST", defaults.host),
        port=int(env.get("PORT", defaults.port)),
        log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
        frontend_url=env.get("FRONTEND_URL", "").strip(),
        upstream_base_url=env.get("UPSTREAM_BASE_URL", defaults.upstream_base_url).rstrip("/"),
        upstream_auth_token=env.get("UPSTREAM_AUTH_TOKEN", "").strip(),
        upstream_timeout=float(env.get("UPSTREAM_TIMEOUT", defaults.upstream_timeout)),
        sample_data_dir=env.get("SAMPLE_DATA_DIR", "").strip(),
        jwt_secret=env.get("JWT_SECRET", defaults.jwt_secret),
        token_ttl_hours=int(env.get("TOKEN_TTL_HOURS", defaults.token_ttl_hours)),
        users_file=Path(env.get("USERS_FILE", str(defaults.users_file))),
        max_devices_per_user=int(env.get("MAX_DEVICES_PER_USER", defaults.max_devices_per_user)),
        bcrypt_rounds=int(env.get("BCRYPT_ROUNDS", defaults.bcrypt_rounds)),
        admin_username=env.get("ADMIN_USERNAME", "").strip(),
        admin_password=env.get("ADMIN_PASSWORD", ""),
        sport_push_interval=float(env.get("SPORT_PUSH_INTERVAL", defaults.sport_push_interval)),
        event_push_interval=float(env.get("EVENT_PUSH_INTERVAL", defaults.event_push_interval)),
        sport_cache_ttl=float(env.get("SPORT_CACHE_TTL", defaults.sport_cache_ttl)),
        event_cache_ttl=float(env.get("EVENT_CACHE_TTL", defaults.event_cache_ttl)),
    )
