"""WebSocket endpoint for live sport and event odds."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, status

from ..auth.dependencies import bearer_token
from ..auth.service import AuthService
from .subscriptions import ConnectionRegistry, ConnectionSubscriptions

logger = logging.getLogger(__name__)


def create_stream_router(registry: ConnectionRegistry, auth: AuthService) -> APIRouter:
    """Create the WebSocket router bound to a connection registry and auth service.

    This factory pattern lets us inject the registry without globals.
    """
    router = APIRouter(prefix="/api/stream", tags=["streaming"])

    @router.websocket("/odds")
    async def stream_odds(websocket: WebSocket) -> None:
        """Bidirectional odds stream.

        Authenticate with ``?token=<jwt>`` or an ``Authorization: Bearer``
        header. Frames in both directions are JSON objects:

            -> {"event": "subscribe_sport", "data": "cricket"}
            -> {"event": "subscribe_event", "data": {"sportName": "cricket", "eventId": "33012345"}}
            -> {"event": "unsubscribe_sport"} / {"event": "unsubscribe_event"}
            <- {"event": "sport_update", "data": {...}}   every 5s while subscribed
            <- {"event": "event_update", "data": {...}}   every 1s while subscribed
        """
        token = websocket.query_params.get("token") or bearer_token(
            websocket.headers.get("authorization")
        )
        identity = auth.verify(token)
        if identity is None:
            logger.info("Rejected stream connection: authentication error")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Authentication error")
            return

        await websocket.accept()

        async def emit(event: str, payload: dict) -> None:
            await websocket.send_json({"event": event, "data": payload})

        connection = registry.open(identity.username, emit)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                text = message.get("text")
                if text is None:
                    logger.warning("%s sent a binary frame", connection.label)
                    continue
                await _dispatch(connection, text)
        finally:
            await registry.close(connection)

    return router


async def _dispatch(connection: ConnectionSubscriptions, text: str) -> None:
    """Route one client frame to the subscription record. Bad frames are logged and ignored."""
    try:
        message = json.loads(text)
    except ValueError:
        logger.warning("%s sent a non-JSON frame", connection.label)
        return
    if not isinstance(message, dict):
        logger.warning("%s sent a frame that is not an object", connection.label)
        return

    event = message.get("event")
    data = message.get("data")

    if event == "subscribe_sport" and isinstance(data, str) and data.strip():
        await connection.subscribe_sport(data.strip())
    elif event == "unsubscribe_sport":
        await connection.unsubscribe_sport()
    elif event == "subscribe_event" and isinstance(data, dict) and data.get("sportName") and data.get("eventId"):
        await connection.subscribe_event(str(data["sportName"]), str(data["eventId"]))
    elif event == "unsubscribe_event":
        await connection.unsubscribe_event()
    else:
        logger.warning("%s sent an unknown or malformed event: %r", connection.label, event)
