"""Factory for the shared market feed state."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .broadcast import BroadcastEngine
from .catalog import DEFAULT_TICK_INTERVAL, SUPPORTED_INSTRUMENTS
from .lifecycle import ConnectionLifecycle
from .registry import SubscriptionRegistry
from .simulator import PriceSimulator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MarketFeed:
    """Everything the tick driver and the connection handlers share.

    One instance per process. Passed by reference to the transport and the
    application lifespan instead of living in module globals.
    """

    simulator: PriceSimulator
    registry: SubscriptionRegistry
    engine: BroadcastEngine
    lifecycle: ConnectionLifecycle

    async def start(self) -> None:
        await self.engine.start()

    async def stop(self) -> None:
        await self.engine.stop()


def create_market_feed(
    catalog: Sequence[str] = SUPPORTED_INSTRUMENTS,
    tick_interval: float = DEFAULT_TICK_INTERVAL,
    seed: int | None = None,
) -> MarketFeed:
    """Build and wire a market feed with an initialized simulator.

    Returns a feed whose engine is not yet running. Caller must await feed.start().
    """
    catalog = tuple(catalog)
    simulator = PriceSimulator(seed=seed)
    simulator.initialize(catalog)
    registry = SubscriptionRegistry(catalog=catalog)

    logger.info(
        "Market feed created: %s, %.2fs tick interval",
        ", ".join(catalog),
        tick_interval,
    )
    return MarketFeed(
        simulator=simulator,
        registry=registry,
        engine=BroadcastEngine(simulator, registry, interval=tick_interval),
        lifecycle=ConnectionLifecycle(registry, simulator),
    )
