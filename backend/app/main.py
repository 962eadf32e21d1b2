"""FastAPI application: WebSocket feed, liveness routes and static client."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings
from .market import MarketFeed, create_market_feed, create_stream_router

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, feed: MarketFeed | None = None) -> FastAPI:
    """Build the application around a market feed.

    The broadcast engine starts with the application lifespan and stops on
    shutdown. Pass ``feed`` to share an existing feed (useful in tests).
    """
    settings = settings or Settings.from_env()
    if feed is None:
        feed = create_market_feed(
            tick_interval=settings.tick_interval,
            seed=settings.simulator_seed,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await feed.start()
        try:
            yield
        finally:
            await feed.stop()

    app = FastAPI(title="Ticker Feed", lifespan=lifespan)
    app.state.feed = feed
    app.include_router(create_stream_router(feed))

    @app.get("/", response_class=PlainTextResponse)
    async def liveness() -> str:
        return "Stock Dashboard backend is running"

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", "sessions": len(feed.registry)}

    # Mounted last so the routes above take precedence
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found; client UI disabled", settings.static_dir)

    return app


def main() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Server running on http://localhost:%d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
