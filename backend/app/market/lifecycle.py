"""Connection event handlers: connect, login, subscribe, disconnect."""

from __future__ import annotations

import logging
from typing import Any

from .broadcast import build_price_update, send_safely
from .errors import MarketFeedError, SessionNotFoundError
from .interface import ClientChannel
from .models import LoginSuccess, Subscribed
from .registry import SubscriptionRegistry
from .simulator import PriceSimulator

logger = logging.getLogger(__name__)


class ConnectionLifecycle:
    """Bridges inbound client events to the registry.

    Successful logins and subscribes are answered immediately on the
    originating connection, outside the tick cycle. Rejected requests get no
    reply at all; the missing acknowledgment is the client's only signal.
    """

    def __init__(self, registry: SubscriptionRegistry, simulator: PriceSimulator) -> None:
        self._registry = registry
        self._sim = simulator

    def connect(self, connection_id: str, channel: ClientChannel) -> None:
        self._registry.create_session(connection_id, channel)
        logger.info("Client connected: %s", connection_id)

    def disconnect(self, connection_id: str) -> None:
        self._registry.remove_session(connection_id)
        logger.info("Client disconnected: %s", connection_id)

    async def login(self, connection_id: str, identity: str) -> bool:
        """Authenticate the session and send it the instrument catalog."""
        try:
            catalog = self._registry.login(connection_id, identity)
        except SessionNotFoundError as e:
            logger.warning("Login ignored: %s", e)
            return False

        logger.info("Client %s logged in as %s", connection_id, identity)
        session = self._registry.get(connection_id)
        if session is not None:
            await send_safely(session.channel, LoginSuccess(supported_instruments=catalog))
        return True

    async def subscribe(self, connection_id: str, instrument: str) -> bool:
        """Subscribe the session and push the instrument's current price right away."""
        try:
            self._registry.subscribe(connection_id, instrument)
        except MarketFeedError as e:
            logger.debug("Subscribe rejected: %s", e)
            return False

        session = self._registry.get(connection_id)
        if session is None:
            return True
        if await send_safely(session.channel, Subscribed(instrument=instrument)):
            update = build_price_update(self._sim, [instrument])
            if update is not None:
                await send_safely(session.channel, update)
        return True

    async def handle_message(self, connection_id: str, event: str, data: Any) -> None:
        """Dispatch one decoded inbound event. Unknown events are ignored."""
        if event == "login":
            if not isinstance(data, str):
                logger.warning("Ignoring login from %s: identity must be a string", connection_id)
                return
            await self.login(connection_id, data)
        elif event == "subscribe":
            if not isinstance(data, str):
                logger.debug("Ignoring subscribe from %s: instrument must be a string", connection_id)
                return
            await self.subscribe(connection_id, data)
        else:
            logger.warning("Ignoring unknown event %r from %s", event, connection_id)
