"""Static instrument catalog and simulation parameters."""

# Instruments clients may subscribe to. Fixed for the lifetime of the process.
SUPPORTED_INSTRUMENTS: tuple[str, ...] = ("GOOG", "TSLA", "AMZN", "META", "NVDA")

# Seed prices are drawn uniformly from [low, high)
SEED_PRICE_RANGE: tuple[float, float] = (100.0, 500.0)

# Per-tick perturbation is drawn uniformly from [-MAX_PERTURBATION, +MAX_PERTURBATION]
MAX_PERTURBATION = 5.0

# Prices are clamped here; the simulator never produces a negative price
PRICE_FLOOR = 0.0

# Number of most recent prices kept per instrument for charting
HISTORY_CAPACITY = 10

# Seconds between broadcast ticks
DEFAULT_TICK_INTERVAL = 1.0

# Seconds a single send may take before it is abandoned as failed
DEFAULT_SEND_TIMEOUT = 5.0
