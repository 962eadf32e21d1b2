"""Exceptions raised by the subscription registry and simulator.

None of these are fatal. ConnectionLifecycle catches them and drops the
request without replying to the client.
"""

from __future__ import annotations


class MarketFeedError(Exception):
    """Base class for recoverable market feed errors."""


class SessionNotFoundError(MarketFeedError):
    """No session is registered for the connection id."""

    def __init__(self, connection_id: str) -> None:
        super().__init__(f"No session for connection {connection_id!r}")
        self.connection_id = connection_id


class NotLoggedInError(MarketFeedError):
    """The session exists but has not completed login."""

    def __init__(self, connection_id: str) -> None:
        super().__init__(f"Connection {connection_id!r} has not logged in")
        self.connection_id = connection_id


class InvalidInstrumentError(MarketFeedError):
    """The instrument is not part of the static catalog."""

    def __init__(self, instrument: object) -> None:
        super().__init__(f"Unsupported instrument: {instrument!r}")
        self.instrument = instrument
