"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .market.catalog import DEFAULT_TICK_INTERVAL

DEFAULT_PORT = 3000
DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    """Process configuration.

    - PORT            HTTP port (default 3000)
    - HOST            bind address (default 0.0.0.0)
    - TICK_INTERVAL   seconds between broadcast ticks (default 1.0)
    - SIMULATOR_SEED  integer seed for reproducible prices (default: random)
    - LOG_LEVEL       logging level name (default INFO)
    - STATIC_DIR      directory served as the client UI
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    tick_interval: float = DEFAULT_TICK_INTERVAL
    simulator_seed: int | None = None
    log_level: str = "INFO"
    static_dir: Path = field(default=DEFAULT_STATIC_DIR)

    @classmethod
    def from_env(cls) -> Settings:
        static_dir = os.environ.get("STATIC_DIR", "").strip()
        return cls(
            host=os.environ.get("HOST", "").strip() or "0.0.0.0",
            port=_env_int("PORT", DEFAULT_PORT),  # type: ignore[arg-type]
            tick_interval=_env_float("TICK_INTERVAL", DEFAULT_TICK_INTERVAL),
            simulator_seed=_env_int("SIMULATOR_SEED", None),
            log_level=os.environ.get("LOG_LEVEL", "").strip().upper() or "INFO",
            static_dir=Path(static_dir) if static_dir else DEFAULT_STATIC_DIR,
        )
