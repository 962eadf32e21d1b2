"""Periodic tick driver and subscription-filtered fan-out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from .catalog import DEFAULT_SEND_TIMEOUT, DEFAULT_TICK_INTERVAL
from .interface import ClientChannel
from .models import OutboundMessage, PriceUpdate
from .registry import SessionView, SubscriptionRegistry
from .simulator import PriceSimulator

logger = logging.getLogger(__name__)


def build_price_update(simulator: PriceSimulator, instruments: Iterable[str]) -> PriceUpdate | None:
    """PriceUpdate for the given instruments, or None if none of them are simulated.

    Instruments the simulator does not know are left out rather than failing
    the whole update.
    """
    snapshots = [simulator.snapshot(sym) for sym in sorted(instruments) if sym in simulator]
    if not snapshots:
        return None
    return PriceUpdate.from_snapshots(snapshots)


async def send_safely(
    channel: ClientChannel,
    message: OutboundMessage,
    timeout: float | None = DEFAULT_SEND_TIMEOUT,
) -> bool:
    """Send one message, logging instead of raising on failure. Returns True on success.

    A send still pending after ``timeout`` seconds is cancelled and counts as
    failed, so a stalled peer cannot hold up the caller.
    """
    try:
        await asyncio.wait_for(channel.send(message), timeout)
    except asyncio.TimeoutError:
        logger.warning(
            "Timed out sending %s to %s after %.2fs", message.event, channel.connection_id, timeout
        )
        return False
    except Exception as e:
        logger.warning(
            "Failed to send %s to %s: %s", message.event, channel.connection_id, e
        )
        return False
    return True


class BroadcastEngine:
    """Advances the simulator once per interval and fans out filtered updates.

    Runs a background asyncio task that starts a tick every `interval` seconds.
    Each tick runs as its own task, so a slow fan-out never delays the next
    tick; every send is also bounded by `send_timeout`.

    Each logged-in session with at least one subscription receives a single
    PriceUpdate restricted to its own instruments. Sessions without
    subscriptions receive nothing.
    """

    def __init__(
        self,
        simulator: PriceSimulator,
        registry: SubscriptionRegistry,
        interval: float = DEFAULT_TICK_INTERVAL,
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        if send_timeout <= 0:
            raise ValueError(f"send_timeout must be positive, got {send_timeout}")
        self._sim = simulator
        self._registry = registry
        self._interval = interval
        self._send_timeout = send_timeout
        self._task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()  # ticks still fanning out
        self._ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def ticks(self) -> int:
        """Number of ticks started since construction."""
        return self._ticks

    @property
    def pending_ticks(self) -> int:
        """Ticks whose fan-out has not finished yet."""
        return len(self._pending)

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run_loop(), name="broadcast-loop")
        logger.info("Broadcast engine started: %.2fs interval", self._interval)

    async def stop(self) -> None:
        tasks = list(self._pending)
        if self._task and not self._task.done():
            tasks.append(self._task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()
        self._task = None
        logger.info("Broadcast engine stopped")

    async def tick(self) -> int:
        """Advance prices and push one update to every subscribed session.

        Returns the number of sessions the update was delivered to.
        """
        self._sim.tick()
        self._ticks += 1

        # Snapshot first: connects and disconnects during the sends below
        # do not disturb this iteration.
        sessions = self._registry.live_sessions()
        sends = []
        for session in sessions:
            message = self._message_for(session)
            if message is not None:
                sends.append(self._deliver(session, message))

        if not sends:
            return 0
        results = await asyncio.gather(*sends)
        delivered = sum(results)
        logger.debug("Tick %d: delivered to %d/%d sessions", self._ticks, delivered, len(sessions))
        return delivered

    # --- Internals ---

    def _message_for(self, session: SessionView) -> PriceUpdate | None:
        if not session.logged_in or not session.subscriptions:
            return None
        return build_price_update(self._sim, session.subscriptions)

    async def _deliver(self, session: SessionView, message: PriceUpdate) -> bool:
        # The session may have disconnected after the snapshot was taken
        if not self._registry.is_live(session.connection_id):
            logger.debug("Skipping %s: session closed mid-tick", session.connection_id)
            return False
        return await send_safely(session.channel, message, timeout=self._send_timeout)

    def _on_tick_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Broadcast tick failed", exc_info=exc)

    async def _run_loop(self) -> None:
        """Core loop: sleep, start a tick, repeat. Errors never stop the loop."""
        while True:
            await asyncio.sleep(self._interval)
            task = asyncio.create_task(self.tick(), name=f"broadcast-tick-{self._ticks + 1}")
            self._pending.add(task)
            task.add_done_callback(self._on_tick_done)
