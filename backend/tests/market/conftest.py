"""Fixtures for market feed tests.

Provides an in-memory ClientChannel that records every message sent to it,
so fan-out behaviour can be asserted without a real transport.
"""

import asyncio
from unittest.mock import MagicMock

import numpy as np
import pytest

from app.market.interface import ClientChannel
from app.market.registry import SubscriptionRegistry
from app.market.simulator import PriceSimulator


class FakeChannel(ClientChannel):
    """ClientChannel that stores sent messages instead of delivering them."""

    def __init__(self, connection_id: str, fail: bool = False, stall: bool = False) -> None:
        self._id = connection_id
        self.fail = fail
        self.stall = stall
        self.sent = []

    @property
    def connection_id(self) -> str:
        return self._id

    async def send(self, message) -> None:
        if self.stall:
            await asyncio.Event().wait()  # peer never drains
        if self.fail:
            raise ConnectionError(f"{self._id} is closed")
        self.sent.append(message)

    def events(self) -> list[str]:
        return [m.event for m in self.sent]

    def of_type(self, event: str) -> list:
        return [m for m in self.sent if m.event == event]


@pytest.fixture
def make_channel():
    """Factory for FakeChannel instances."""
    return FakeChannel


@pytest.fixture
def simulator() -> PriceSimulator:
    sim = PriceSimulator(seed=42)
    sim.initialize(["GOOG", "TSLA", "AMZN", "META", "NVDA"])
    return sim


@pytest.fixture
def registry() -> SubscriptionRegistry:
    return SubscriptionRegistry()


def fixed_perturbation(sim: PriceSimulator, value: float) -> None:
    """Replace the simulator's RNG so every tick moves each price by ``value``."""
    rng = MagicMock()
    rng.uniform.side_effect = lambda low, high, size: np.full(size, value)
    sim._rng = rng


@pytest.fixture
def set_perturbation():
    return fixed_perturbation
