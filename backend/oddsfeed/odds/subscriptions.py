"""Per-connection sport and event subscriptions with periodic push cycles."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .service import OddsService

logger = logging.getLogger(__name__)

Emit = Callable[[str, dict], Awaitable[None]]
Load = Callable[[], Awaitable[dict]]

SPORT_UPDATE = "sport_update"
EVENT_UPDATE = "event_update"

SPORT_PUSH_INTERVAL = 5.0
EVENT_PUSH_INTERVAL = 1.0


@dataclass
class _Lane:
    """One independent subscription channel of a connection."""

    name: str
    event: str
    interval: float
    key: Any = None
    task: asyncio.Task | None = None


class ConnectionSubscriptions:
    """Subscription state for a single streaming connection.

    Each connection has two lanes, sport and event. A lane holds at most one
    running task; subscribing again cancels the old task before the new one
    does any work. A lane's task runs one fetch-and-push cycle immediately and
    then repeats on a fixed-rate schedule until it is cancelled. Cycles within
    a lane never overlap.

    Failed cycles are logged and skipped; the lane keeps running. Once the
    connection is closed nothing more is pushed, even from a fetch that was
    already in flight.
    """

    def __init__(
        self,
        service: OddsService,
        emit: Emit,
        label: str = "client",
        sport_interval: float = SPORT_PUSH_INTERVAL,
        event_interval: float = EVENT_PUSH_INTERVAL,
    ) -> None:
        self._service = service
        self._emit = emit
        self.label = label
        self._sport = _Lane(name="sport", event=SPORT_UPDATE, interval=sport_interval)
        self._event = _Lane(name="event", event=EVENT_UPDATE, interval=event_interval)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sport_subscription(self) -> str | None:
        return self._sport.key

    @property
    def event_subscription(self) -> dict | None:
        return self._event.key

    async def subscribe_sport(self, sport_name: str) -> None:
        logger.info("%s subscribed to sport: %s", self.label, sport_name)
        await self._start(self._sport, sport_name, lambda: self._service.get_sport_data(sport_name))

    async def subscribe_event(self, sport_name: str, event_id: str) -> None:
        logger.info("%s subscribed to event: %s/%s", self.label, sport_name, event_id)
        await self._start(
            self._event,
            {"sportName": sport_name, "eventId": event_id},
            lambda: self._service.get_event_data(sport_name, event_id),
        )

    async def unsubscribe_sport(self) -> None:
        await _wait_cancelled(self._detach(self._sport))

    async def unsubscribe_event(self) -> None:
        await _wait_cancelled(self._detach(self._event))

    async def close(self) -> None:
        """Cancel both lanes. The connection accepts no new subscriptions afterwards."""
        self._closed = True
        await _wait_cancelled(self._detach(self._sport), self._detach(self._event))

    # --- Internal ---

    async def _start(self, lane: _Lane, key: Any, load: Load) -> None:
        if self._closed:
            logger.debug("%s: ignoring %s subscription on closed connection", self.label, lane.name)
            return
        previous = self._detach(lane)
        if previous is not None:
            previous.cancel()
        lane.key = key
        lane.task = asyncio.create_task(self._run(lane, load), name=f"{self.label}:{lane.name}")
        await _wait_cancelled(previous)

    @staticmethod
    def _detach(lane: _Lane) -> asyncio.Task | None:
        previous = lane.task
        lane.task = None
        lane.key = None
        return previous

    async def _run(self, lane: _Lane, load: Load) -> None:
        """Cycle forever at a fixed rate. A slow cycle delays the next tick instead of overlapping it."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            await self._cycle(lane, load)
            next_tick += lane.interval
            delay = next_tick - loop.time()
            if delay < 0:
                # Fell behind; restart the schedule rather than firing a burst
                next_tick = loop.time()
                delay = 0
            await asyncio.sleep(delay)

    async def _cycle(self, lane: _Lane, load: Load) -> None:
        try:
            payload = await load()
        except Exception:
            logger.exception("%s: %s cycle failed for %s", self.label, lane.name, lane.key)
            return

        if not payload.get("success"):
            logger.warning(
                "%s: skipping %s push for %s: %s",
                self.label,
                lane.name,
                lane.key,
                payload.get("message"),
            )
            return

        # The lane may have been replaced or the connection closed while fetching
        if self._closed or lane.task is not asyncio.current_task():
            return

        try:
            await self._emit(lane.event, payload)
            logger.debug("%s: pushed %s", self.label, lane.event)
        except Exception as e:
            logger.warning("%s: %s push failed: %s", self.label, lane.event, e)


class ConnectionRegistry:
    """Owns the subscription record of every live streaming connection.

    Closing a connection cancels every task it owns; close_all() is used at
    application shutdown.
    """

    def __init__(
        self,
        service: OddsService,
        sport_interval: float = SPORT_PUSH_INTERVAL,
        event_interval: float = EVENT_PUSH_INTERVAL,
    ) -> None:
        self._service = service
        self._sport_interval = sport_interval
        self._event_interval = event_interval
        self._connections: set[ConnectionSubscriptions] = set()

    def open(self, label: str, emit: Emit) -> ConnectionSubscriptions:
        connection = ConnectionSubscriptions(
            self._service,
            emit,
            label=label,
            sport_interval=self._sport_interval,
            event_interval=self._event_interval,
        )
        self._connections.add(connection)
        logger.info("Client connected: %s (%d open)", label, len(self._connections))
        return connection

    async def close(self, connection: ConnectionSubscriptions) -> None:
        self._connections.discard(connection)
        await connection.close()
        logger.info("Client disconnected: %s (%d open)", connection.label, len(self._connections))

    async def close_all(self) -> None:
        connections = list(self._connections)
        self._connections.clear()
        await asyncio.gather(*(connection.close() for connection in connections))

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return connection in self._connections


async def _wait_cancelled(*tasks: asyncio.Task | None) -> None:
    """Cancel the tasks and wait for them to finish.

    A cancellation of the caller itself is not swallowed.
    """
    pending = {task for task in tasks if task is not None and not task.done()}
    if not pending:
        return
    for task in pending:
        task.cancel()
    await asyncio.wait(pending)
