"""Abstract interface for client message channels."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import OutboundMessage


class ClientChannel(ABC):
    """Contract for the transport side of one client connection.

    The core never touches sockets directly. It hands typed messages to a
    channel, and the transport decides how to encode and deliver them.

    Lifecycle:
        channel = WebSocketChannel(websocket)
        lifecycle.connect(channel.connection_id, channel)
        # ... inbound events dispatched via lifecycle.handle_message() ...
        await channel.send(PriceUpdate(...))
        # ... connection closes ...
        lifecycle.disconnect(channel.connection_id)
    """

    @property
    @abstractmethod
    def connection_id(self) -> str:
        """Unique identifier for this connection, assigned by the transport."""

    @abstractmethod
    async def send(self, message: OutboundMessage) -> None:
        """Deliver one message to the remote client.

        Fire-and-forget: there is no acknowledgment. May raise if the
        connection has already gone away; callers log and move on.
        """
