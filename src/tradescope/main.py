"""Entry point for tradescope.

Wires components from a single AppSettings instance and serves the analytics
API with uvicorn. The ledger retention loop runs in the same event loop.

Component wiring order (in build_components):
1. AppSettings (configuration)
2. Logging setup
3. BinanceMarketDataClient (public market data)
4. MarketSnapshotBuilder
5. DecisionLedger
6. PerformanceAnalyzer
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from tradescope.analytics.performance import PerformanceAnalyzer
from tradescope.config import AppSettings
from tradescope.ledger.maintenance import ledger_maintenance_loop, prune_expired
from tradescope.ledger.store import DecisionLedger
from tradescope.logging import get_logger, setup_logging
from tradescope.market_data.binance_client import BinanceMarketDataClient
from tradescope.market_data.snapshot import MarketSnapshotBuilder


def build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    market_data_client = BinanceMarketDataClient(settings.market_data)
    snapshot_builder = MarketSnapshotBuilder(market_data_client, settings.market_data)
    ledger = DecisionLedger(settings.ledger.log_dir)
    analyzer = PerformanceAnalyzer(ledger, settings.analysis)

    return {
        "market_data_client": market_data_client,
        "snapshot_builder": snapshot_builder,
        "ledger": ledger,
        "analyzer": analyzer,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Expose components on app.state and run ledger retention in the background.

    On shutdown: cancels the retention loop and closes the market data client.
    """
    logger = get_logger("tradescope.main")
    settings: AppSettings = app.state.settings
    components = app.state.components

    app.state.snapshot_builder = components["snapshot_builder"]
    app.state.ledger = components["ledger"]
    app.state.analyzer = components["analyzer"]

    maintenance_task = asyncio.create_task(
        ledger_maintenance_loop(
            components["ledger"],
            settings.ledger.retention_days,
            settings.ledger.prune_interval,
        )
    )

    logger.info("lifespan_started", log_dir=settings.ledger.log_dir)

    yield

    maintenance_task.cancel()
    try:
        await maintenance_task
    except asyncio.CancelledError:
        pass

    await components["market_data_client"].close()
    logger.info("tradescope_stopped")


async def run() -> None:
    """Run tradescope.

    With the API enabled (API_ENABLED=true, the default) this serves until
    interrupted. With it disabled, it applies ledger retention once, logs the
    current ledger statistics and performance summary, and exits.
    """
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("tradescope.main")

    components = build_components(settings)

    if settings.api.enabled:
        from tradescope.api.app import create_app

        app = create_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        logger.info("starting_api", host=settings.api.host, port=settings.api.port)

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        await server.serve()
        return

    try:
        ledger: DecisionLedger = components["ledger"]
        prune_expired(ledger, settings.ledger.retention_days)
        stats = ledger.statistics()
        analysis = components["analyzer"].analyze_recent()
        logger.info(
            "ledger_summary",
            total_cycles=stats.total_cycles,
            successful_cycles=stats.successful_cycles,
            failed_cycles=stats.failed_cycles,
            total_trades=analysis.total_trades,
            win_rate=round(analysis.win_rate, 3),
            profit_factor=analysis.profit_factor,
            best_symbol=analysis.best_symbol,
            worst_symbol=analysis.worst_symbol,
        )
    finally:
        await components["market_data_client"].close()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
