"""Thread-safe registry of client sessions and their subscriptions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

from .catalog import SUPPORTED_INSTRUMENTS
from .errors import InvalidInstrumentError, NotLoggedInError, SessionNotFoundError
from .interface import ClientChannel


@dataclass(slots=True)
class ClientSession:
    """Mutable server-side state for one live connection. Owned by the registry."""

    connection_id: str
    channel: ClientChannel
    identity: str | None = None
    subscriptions: set[str] = field(default_factory=set)

    @property
    def logged_in(self) -> bool:
        return self.identity is not None

    def view(self) -> SessionView:
        return SessionView(
            connection_id=self.connection_id,
            channel=self.channel,
            identity=self.identity,
            subscriptions=frozenset(self.subscriptions),
        )


@dataclass(frozen=True, slots=True)
class SessionView:
    """Immutable copy of a session, safe to read outside the registry lock."""

    connection_id: str
    channel: ClientChannel
    identity: str | None
    subscriptions: frozenset[str]

    @property
    def logged_in(self) -> bool:
        return self.identity is not None


class SubscriptionRegistry:
    """Per-connection identity and instrument subscriptions.

    Writers: ConnectionLifecycle (connect, login, subscribe, disconnect).
    Readers: BroadcastEngine, once per tick, via live_sessions().

    Every mutation and every snapshot happens under one lock, so a reader sees
    each session's subscription set either entirely before or entirely after a
    concurrent subscribe.
    """

    def __init__(self, catalog: tuple[str, ...] = SUPPORTED_INSTRUMENTS) -> None:
        self._catalog = tuple(catalog)
        self._sessions: dict[str, ClientSession] = {}
        self._lock = Lock()

    @property
    def catalog(self) -> tuple[str, ...]:
        return self._catalog

    def create_session(self, connection_id: str, channel: ClientChannel) -> None:
        """Register an unauthenticated session. No-op if the id already exists."""
        with self._lock:
            if connection_id in self._sessions:
                return
            self._sessions[connection_id] = ClientSession(connection_id=connection_id, channel=channel)

    def login(self, connection_id: str, identity: str) -> tuple[str, ...]:
        """Attach an identity and reset subscriptions. Returns the instrument catalog.

        Logging in again on the same connection is allowed and clears any
        existing subscriptions.
        """
        with self._lock:
            session = self._sessions.get(connection_id)
            if session is None:
                raise SessionNotFoundError(connection_id)
            session.identity = identity
            session.subscriptions = set()
        return self._catalog

    def subscribe(self, connection_id: str, instrument: str) -> None:
        """Add an instrument to a logged-in session's subscriptions.

        Raises SessionNotFoundError, NotLoggedInError or InvalidInstrumentError
        without changing any state.
        """
        with self._lock:
            session = self._sessions.get(connection_id)
            if session is None:
                raise SessionNotFoundError(connection_id)
            if not session.logged_in:
                raise NotLoggedInError(connection_id)
            if instrument not in self._catalog:
                raise InvalidInstrumentError(instrument)
            session.subscriptions.add(instrument)

    def remove_session(self, connection_id: str) -> None:
        """Delete a session. Safe to call for unknown ids."""
        with self._lock:
            self._sessions.pop(connection_id, None)

    def get(self, connection_id: str) -> SessionView | None:
        """Snapshot of a single session, or None if it does not exist."""
        with self._lock:
            session = self._sessions.get(connection_id)
            return session.view() if session else None

    def is_live(self, connection_id: str) -> bool:
        return connection_id in self

    def live_sessions(self) -> list[SessionView]:
        """Snapshot of all current sessions. Order is not significant."""
        with self._lock:
            return [session.view() for session in self._sessions.values()]

    def for_each_live_session(self, fn: Callable[[SessionView], object]) -> None:
        """Call ``fn`` once per session in a snapshot taken at call time."""
        for view in self.live_sessions():
            fn(view)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._sessions
