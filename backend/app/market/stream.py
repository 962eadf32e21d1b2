"""WebSocket endpoint for subscription-filtered price updates."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from .factory import MarketFeed
from .interface import ClientChannel
from .models import OutboundMessage

logger = logging.getLogger(__name__)


class MalformedMessageError(ValueError):
    """An inbound frame is not a valid {"event": ..., "data": ...} envelope."""


def encode_message(message: OutboundMessage) -> dict[str, Any]:
    """Wrap an outbound message in the wire envelope."""
    return {"event": message.event, "data": message.to_payload()}


def decode_message(raw: str | None) -> tuple[str, Any]:
    """Parse an inbound text frame into (event, data).

    Binary frames arrive here as None and are rejected like any other
    malformed input.
    """
    if not isinstance(raw, str):
        raise MalformedMessageError("only text frames are supported")
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessageError(f"invalid JSON: {e}") from None
    if not isinstance(envelope, dict):
        raise MalformedMessageError("envelope must be a JSON object")
    event = envelope.get("event")
    if not isinstance(event, str) or not event:
        raise MalformedMessageError("envelope is missing an event name")
    return event, envelope.get("data")


class WebSocketChannel(ClientChannel):
    """ClientChannel backed by a FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket, connection_id: str | None = None) -> None:
        self._ws = websocket
        self._id = connection_id or uuid.uuid4().hex

    @property
    def connection_id(self) -> str:
        return self._id

    async def send(self, message: OutboundMessage) -> None:
        await self._ws.send_json(encode_message(message))


def create_stream_router(feed: MarketFeed) -> APIRouter:
    """Create the WebSocket router with a reference to the market feed.

    This factory pattern lets us inject the feed without globals.
    """
    router = APIRouter(tags=["streaming"])

    @router.websocket("/ws")
    async def price_socket(websocket: WebSocket) -> None:
        """Bidirectional price feed.

        Inbound frames:  {"event": "login", "data": "<identity>"}
                         {"event": "subscribe", "data": "<instrument>"}
        Outbound frames: {"event": "loginSuccess" | "subscribed" | "priceUpdate", "data": ...}
        """
        await websocket.accept()
        channel = WebSocketChannel(websocket)
        conn_id = channel.connection_id
        feed.lifecycle.connect(conn_id, channel)

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                raw = frame.get("text")
                try:
                    event, data = decode_message(raw)
                except MalformedMessageError as e:
                    logger.warning("Dropping frame from %s: %s", conn_id, e)
                    continue
                await feed.lifecycle.handle_message(conn_id, event, data)
        except WebSocketDisconnect:
            pass
        finally:
            feed.lifecycle.disconnect(conn_id)

    return router
