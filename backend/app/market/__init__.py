"""Market feed subsystem.

Public API:
    PriceSimulator       - Random-walk price state with bounded history
    SubscriptionRegistry - Thread-safe per-connection sessions and subscriptions
    BroadcastEngine      - Periodic tick driver with filtered fan-out
    ConnectionLifecycle  - Connect / login / subscribe / disconnect handlers
    ClientChannel        - Abstract interface for a client connection
    MarketFeed           - Container for the shared feed state
    create_market_feed   - Factory that builds and wires a MarketFeed
    create_stream_router - FastAPI router factory for the WebSocket endpoint
"""

from .broadcast import BroadcastEngine
from .catalog import SUPPORTED_INSTRUMENTS
from .errors import InvalidInstrumentError, MarketFeedError, NotLoggedInError, SessionNotFoundError
from .factory import MarketFeed, create_market_feed
from .interface import ClientChannel
from .lifecycle import ConnectionLifecycle
from .models import LoginSuccess, PriceHistory, PriceSnapshot, PriceUpdate, Subscribed
from .registry import SubscriptionRegistry
from .simulator import PriceSimulator
from .stream import create_stream_router

__all__ = [
    "SUPPORTED_INSTRUMENTS",
    "BroadcastEngine",
    "ClientChannel",
    "ConnectionLifecycle",
    "InvalidInstrumentError",
    "LoginSuccess",
    "MarketFeed",
    "MarketFeedError",
    "NotLoggedInError",
    "PriceHistory",
    "PriceSimulator",
    "PriceSnapshot",
    "PriceUpdate",
    "SessionNotFoundError",
    "Subscribed",
    "SubscriptionRegistry",
    "create_market_feed",
    "create_stream_router",
]
