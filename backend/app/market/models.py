"""Data models for the market feed."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .catalog import HISTORY_CAPACITY


class PriceHistory:
    """Fixed-capacity, chronologically ordered record of recent prices.

    Backed by a bounded deque: appending to a full history evicts the oldest
    price in O(1).
    """

    def __init__(self, values: Iterable[float] = (), capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._values: deque[float] = deque(values, maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen  # type: ignore[return-value]

    def append(self, price: float) -> None:
        self._values.append(price)

    @property
    def last(self) -> float:
        """Most recent price. Raises IndexError if the history is empty."""
        return self._values[-1]

    def to_tuple(self) -> tuple[float, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"PriceHistory({list(self._values)!r}, capacity={self.capacity})"


@dataclass(frozen=True, slots=True)
class PriceSnapshot:
    """Immutable view of one instrument's price state after a completed tick."""

    instrument: str
    current: float
    history: tuple[float, ...]


# --- Outbound messages ---
#
# Each message knows its wire event name and how to render its payload.
# The transport wraps them as {"event": ..., "data": ...}.


@dataclass(frozen=True, slots=True)
class LoginSuccess:
    """Reply to a successful login, listing the instruments a client may subscribe to."""

    event: ClassVar[str] = "loginSuccess"

    supported_instruments: tuple[str, ...]

    def to_payload(self) -> dict[str, Any]:
        return {"supportedInstruments": list(self.supported_instruments)}


@dataclass(frozen=True, slots=True)
class Subscribed:
    """Acknowledges a successful subscribe."""

    event: ClassVar[str] = "subscribed"

    instrument: str

    def to_payload(self) -> str:
        return self.instrument


@dataclass(frozen=True, slots=True)
class PriceUpdate:
    """Current prices and histories for a subset of instruments.

    Prices are stored at full precision and rounded only in to_payload():
    current prices become 2dp strings, history entries 2dp floats.
    """

    event: ClassVar[str] = "priceUpdate"

    prices: dict[str, float] = field(default_factory=dict)
    histories: dict[str, tuple[float, ...]] = field(default_factory=dict)

    @classmethod
    def from_snapshots(cls, snapshots: Iterable[PriceSnapshot]) -> PriceUpdate:
        prices: dict[str, float] = {}
        histories: dict[str, tuple[float, ...]] = {}
        for snap in snapshots:
            prices[snap.instrument] = snap.current
            histories[snap.instrument] = snap.history
        return cls(prices=prices, histories=histories)

    @property
    def instruments(self) -> set[str]:
        return set(self.prices)

    def __bool__(self) -> bool:
        return bool(self.prices)

    def to_payload(self) -> dict[str, Any]:
        """Serialize for JSON transmission."""
        return {
            "prices": {sym: format_price(price) for sym, price in self.prices.items()},
            "histories": {
                sym: [round(p, 2) for p in history] for sym, history in self.histories.items()
            },
        }


OutboundMessage = LoginSuccess | Subscribed | PriceUpdate


def format_price(price: float) -> str:
    """Render a price as a string with exactly two decimal places."""
    return f"{price:.2f}"
