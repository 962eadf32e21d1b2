"""Random-walk price simulator."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from threading import Lock

import numpy as np

from .catalog import HISTORY_CAPACITY, MAX_PERTURBATION, PRICE_FLOOR, SEED_PRICE_RANGE
from .errors import InvalidInstrumentError
from .models import PriceHistory, PriceSnapshot

logger = logging.getLogger(__name__)


class PriceSimulator:
    """Bounded random walk over a fixed set of instruments.

    Math:
        S(0)   ~ U[low, high)
        S(t+1) = max(floor, S(t) + P),   P ~ U[-max_perturbation, +max_perturbation]

    Each instrument moves independently. Prices keep full precision; the last
    ``history_capacity`` prices are retained per instrument for charting.

    tick() and snapshot() share one lock, so a snapshot taken while a tick is
    in progress sees either all of the old prices or all of the new ones.
    """

    def __init__(
        self,
        seed: int | None = None,
        seed_range: tuple[float, float] = SEED_PRICE_RANGE,
        max_perturbation: float = MAX_PERTURBATION,
        history_capacity: int = HISTORY_CAPACITY,
    ) -> None:
        low, high = seed_range
        if not 0 <= low < high:
            raise ValueError(f"Invalid seed range: {seed_range}")

        self._rng = np.random.default_rng(seed)
        self._seed_range = (low, high)
        self._max_perturbation = max_perturbation
        self._history_capacity = history_capacity

        self._instruments: tuple[str, ...] = ()
        self._prices: dict[str, float] = {}
        self._histories: dict[str, PriceHistory] = {}
        self._lock = Lock()

    # --- Public API ---

    def initialize(self, catalog: Iterable[str]) -> None:
        """Draw a seed price for every instrument. Must run exactly once."""
        instruments = tuple(dict.fromkeys(catalog))  # dedupe, keep order
        with self._lock:
            if self._instruments:
                raise RuntimeError("PriceSimulator is already initialized")
            if not instruments:
                raise ValueError("Catalog must contain at least one instrument")

            low, high = self._seed_range
            seeds = self._rng.uniform(low, high, size=len(instruments))
            for instrument, seed in zip(instruments, seeds):
                price = float(seed)
                self._prices[instrument] = price
                self._histories[instrument] = PriceHistory([price], capacity=self._history_capacity)
            self._instruments = instruments

        logger.info("Simulator initialized with %d instruments", len(instruments))

    def tick(self) -> dict[str, float]:
        """Advance every instrument by one step. Returns {instrument: new_price}.

        This is the hot path, called once per broadcast interval.
        """
        with self._lock:
            self._require_initialized()
            perturbations = self._rng.uniform(
                -self._max_perturbation, self._max_perturbation, size=len(self._instruments)
            )
            result: dict[str, float] = {}
            for instrument, delta in zip(self._instruments, perturbations):
                price = max(PRICE_FLOOR, self._prices[instrument] + float(delta))
                self._prices[instrument] = price
                self._histories[instrument].append(price)
                result[instrument] = price
            return result

    def snapshot(self, instrument: str) -> PriceSnapshot:
        """Current price and history for an instrument as of the last completed tick."""
        with self._lock:
            self._require_initialized()
            try:
                current = self._prices[instrument]
            except KeyError:
                raise InvalidInstrumentError(instrument) from None
            return PriceSnapshot(
                instrument=instrument,
                current=current,
                history=self._histories[instrument].to_tuple(),
            )

    @property
    def instruments(self) -> tuple[str, ...]:
        return self._instruments

    @property
    def initialized(self) -> bool:
        return bool(self._instruments)

    def __contains__(self, instrument: object) -> bool:
        return instrument in self._prices

    # --- Internals ---

    def _require_initialized(self) -> None:
        if not self._instruments:
            raise RuntimeError("PriceSimulator.initialize() must be called first")
