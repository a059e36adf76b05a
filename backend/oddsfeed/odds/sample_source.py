"""Odds source that replays recorded upstream payloads from disk."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from .interface import OddsSource, RawPayload
from .sports import SPORTS

logger = logging.getLogger(__name__)


class SampleOddsSource(OddsSource):
    """OddsSource backed by ``<sport>.json`` files in a directory.

    Each file holds a recorded sport payload, either the full ``{"result": [...]}``
    response or just the list of market records. Event payloads are carved out
    of the sport file by event id. Files are re-read on every fetch so they can
    be swapped while the server runs.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._dir = Path(data_dir)
        self._files = {sport.type_id: self._dir / f"{sport.id}.json" for sport in SPORTS}

    async def fetch_sport(self, type_id: str) -> RawPayload | None:
        path = self._files.get(type_id)
        if path is None:
            logger.warning("No sample file for sport type %s", type_id)
            return None
        return await asyncio.to_thread(self._load, path)

    async def fetch_event(self, type_id: str, event_id: str) -> RawPayload | None:
        payload = await self.fetch_sport(type_id)
        if payload is None:
            return None
        records = [
            record
            for record in payload["result"]
            if str((record.get("event") or {}).get("id")) == str(event_id)
        ]
        return {"result": records}

    @staticmethod
    def _load(path: Path) -> RawPayload | None:
        """Synchronous file read. Runs in a thread."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning("Sample file missing: %s", path)
            return None
        except (OSError, ValueError) as e:
            logger.error("Could not read sample file %s: %s", path, e)
            return None

        if isinstance(data, list):
            return {"result": data}
        if isinstance(data, dict) and isinstance(data.get("result"), list):
            return data
        logger.error("Unexpected sample file layout in %s", path)
        return None
