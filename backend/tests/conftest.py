"""Pytest configuration and fixtures."""

import pytest

FEED_ENV_VARS = ("PORT", "HOST", "TICK_INTERVAL", "SIMULATOR_SEED", "LOG_LEVEL", "STATIC_DIR")


@pytest.fixture
def event_loop_policy():
    """Use the default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture(autouse=True)
def _isolate_feed_env(monkeypatch):
    """Keep settings from the developer's shell out of the tests."""
    for name in FEED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
