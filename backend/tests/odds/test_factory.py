"""Tests for odds source factory."""

import pytest

from oddsfeed.config import Settings
from oddsfeed.odds.factory import create_odds_source
from oddsfeed.odds.sample_source import SampleOddsSource
from oddsfeed.odds.upstream import HttpOddsSource


@pytest.mark.asyncio
class TestFactory:
    """Tests for create_odds_source factory."""

    async def test_creates_http_source_by_default(self):
        """Test that the live upstream client is used when no sample dir is set."""
        source = create_odds_source(Settings(upstream_auth_token="tok"))
        assert isinstance(source, HttpOddsSource)
        await source.close()

    async def test_creates_http_source_without_token(self):
        """Test that a missing upstream token still yields the live client."""
        source = create_odds_source(Settings())
        assert isinstance(source, HttpOddsSource)
        await source.close()

    async def test_creates_sample_source_when_dir_set(self, tmp_path):
        """Test that SAMPLE_DATA_DIR switches to recorded payloads."""
        source = create_odds_source(Settings(sample_data_dir=str(tmp_path)))
        assert isinstance(source, SampleOddsSource)
