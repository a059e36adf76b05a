"""Factory for creating odds sources."""

from __future__ import annotations

import logging

from ..config import Settings
from .interface import OddsSource

logger = logging.getLogger(__name__)


def create_odds_source(settings: Settings) -> OddsSource:
    """Create the appropriate odds source based on settings.

    - SAMPLE_DATA_DIR set and non-empty → SampleOddsSource (recorded payloads)
    - Otherwise → HttpOddsSource (live upstream API)
    """
    if settings.sample_data_dir:
        from .sample_source import SampleOddsSource

        logger.info("Odds source: sample files in %s", settings.sample_data_dir)
        return SampleOddsSource(settings.sample_data_dir)

    from .upstream import HttpOddsSource

    if not settings.upstream_auth_token:
        logger.warning("UPSTREAM_AUTH_TOKEN is not set; upstream requests may be rejected")
    logger.info("Odds source: upstream API at %s", settings.upstream_base_url)
    return HttpOddsSource(
        base_url=settings.upstream_base_url,
        auth_token=settings.upstream_auth_token,
        timeout=settings.upstream_timeout,
    )
