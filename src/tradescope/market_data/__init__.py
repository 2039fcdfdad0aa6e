"""Market data layer -- candles, indicators, and snapshot assembly."""

from tradescope.market_data.binance_client import BinanceMarketDataClient
from tradescope.market_data.client import MarketDataClient
from tradescope.market_data.models import (
    Candle,
    IntradaySeries,
    LongerTermContext,
    MarketSnapshot,
    OpenInterest,
)
from tradescope.market_data.report import format_snapshot
from tradescope.market_data.snapshot import MarketSnapshotBuilder, normalize_symbol

__all__ = [
    "BinanceMarketDataClient",
    "Candle",
    "IntradaySeries",
    "LongerTermContext",
    "MarketDataClient",
    "MarketSnapshot",
    "MarketSnapshotBuilder",
    "OpenInterest",
    "format_snapshot",
    "normalize_symbol",
]
