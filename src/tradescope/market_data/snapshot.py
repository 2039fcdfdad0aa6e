"""Assemble a MarketSnapshot from candles, open interest and funding rate.

The four upstream series are fetched concurrently and joined all-or-nothing:
any hard failure aborts the build and no partial snapshot is returned. Open
interest and funding rate are optional and come back as None for symbols
without perpetual data.
"""

import asyncio
from collections.abc import Sequence

import structlog

from tradescope.config import MarketDataSettings
from tradescope.exceptions import InsufficientDataError, TradescopeError
from tradescope.logging import get_logger
from tradescope.market_data import indicators
from tradescope.market_data.client import MarketDataClient
from tradescope.market_data.models import (
    Candle,
    IntradaySeries,
    LongerTermContext,
    MarketSnapshot,
    OpenInterest,
)

logger = get_logger(__name__)


def normalize_symbol(symbol: str, quote_asset: str = "USDT") -> str:
    """Upper-case a symbol and append the quote asset if missing (``btc`` -> ``BTCUSDT``)."""
    upper = symbol.strip().upper()
    quote = quote_asset.upper()
    if upper.endswith(quote):
        return upper
    return f"{upper}{quote}"


def price_change_pct(candles: Sequence[Candle], current_price: float, offset: int) -> float:
    """Percent change from the close ``offset`` candles back (counting the latest as 1).

    Returns 0.0 when the feed is shorter than ``offset`` or the reference close
    is not positive.
    """
    if offset <= 0 or len(candles) < offset:
        return 0.0
    reference = candles[-offset].close
    if reference <= 0:
        return 0.0
    return (current_price - reference) / reference * 100.0


def build_intraday_series(candles: Sequence[Candle], window: int = 10) -> IntradaySeries:
    """Per-candle indicators over the last ``window`` candles of the short feed.

    Every value is computed on the growing prefix ending at that candle, so each
    indicator series only starts once the prefix is long enough for it.
    """
    series = IntradaySeries()
    total = len(candles)
    for end in range(max(total - window, 0), total):
        prefix = candles[: end + 1]
        series.mid_prices.append(prefix[-1].close)

        if len(prefix) >= 20:
            series.ema20_values.append(indicators.ema(prefix, 20))
        if len(prefix) >= indicators.MACD_SLOW:
            series.macd_values.append(indicators.macd(prefix))
        if len(prefix) > 7:
            series.rsi7_values.append(indicators.rsi(prefix, 7))
        if len(prefix) > 14:
            series.rsi14_values.append(indicators.rsi(prefix, 14))

    return series


def build_longer_term_context(
    candles: Sequence[Candle], window: int = 10
) -> LongerTermContext | None:
    """Longer-term context over the full long feed, or None for an empty feed."""
    if not candles:
        return None

    context = LongerTermContext(
        ema20=indicators.ema(candles, 20),
        ema50=indicators.ema(candles, 50),
        atr3=indicators.atr(candles, 3),
        atr14=indicators.atr(candles, 14),
        current_volume=candles[-1].volume,
        average_volume=sum(c.volume for c in candles) / len(candles),
    )

    total = len(candles)
    for end in range(max(total - window, 0), total):
        prefix = candles[: end + 1]
        if len(prefix) >= indicators.MACD_SLOW:
            context.macd_values.append(indicators.macd(prefix))
        if len(prefix) > 14:
            context.rsi14_values.append(indicators.rsi(prefix, 14))

    return context


class MarketSnapshotBuilder:
    """Builds MarketSnapshots for symbols from a MarketDataClient.

    Usage:
        builder = MarketSnapshotBuilder(client, settings.market_data)
        snapshot = await builder.build("btc")
    """

    def __init__(self, client: MarketDataClient, settings: MarketDataSettings) -> None:
        self._client = client
        self._settings = settings

    async def build(self, symbol: str) -> MarketSnapshot:
        """Fetch all series for ``symbol`` and assemble the snapshot.

        Raises:
            TransportError: A required or optional series could not be reached.
            ParseError: An upstream payload was malformed.
            InsufficientDataError: The short-interval feed has no usable latest close.
        """
        settings = self._settings
        symbol = normalize_symbol(symbol, settings.quote_asset)

        with structlog.contextvars.bound_contextvars(symbol=symbol):
            try:
                short_candles, long_candles, open_interest, funding_rate = (
                    await asyncio.gather(
                        self._client.fetch_klines(
                            symbol, settings.short_interval, settings.short_limit
                        ),
                        self._client.fetch_klines(
                            symbol, settings.long_interval, settings.long_limit
                        ),
                        self._client.fetch_open_interest(symbol),
                        self._client.fetch_funding_rate(symbol),
                    )
                )
            except TradescopeError as e:
                logger.warning(
                    "snapshot_build_failed",
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise

            snapshot = self._assemble(
                symbol, short_candles, long_candles, open_interest, funding_rate
            )
            logger.info(
                "snapshot_built",
                current_price=snapshot.current_price,
                short_candles=len(short_candles),
                long_candles=len(long_candles),
                has_open_interest=snapshot.open_interest is not None,
                has_funding_rate=snapshot.funding_rate is not None,
            )
            return snapshot

    def _assemble(
        self,
        symbol: str,
        short_candles: list[Candle],
        long_candles: list[Candle],
        open_interest: OpenInterest | None,
        funding_rate: float | None,
    ) -> MarketSnapshot:
        settings = self._settings
        current_price = short_candles[-1].close if short_candles else 0.0
        if current_price == 0:
            logger.warning("snapshot_missing_current_price", candles=len(short_candles))
            raise InsufficientDataError(
                symbol,
                f"{settings.short_interval} klines",
                "no latest close to price the snapshot",
            )

        return MarketSnapshot(
            symbol=symbol,
            current_price=current_price,
            price_change_1h=price_change_pct(
                short_candles, current_price, settings.short_change_offset
            ),
            price_change_4h=price_change_pct(
                long_candles, current_price, settings.long_change_offset
            ),
            current_ema20=indicators.ema(short_candles, 20),
            current_macd=indicators.macd(short_candles),
            current_rsi7=indicators.rsi(short_candles, 7),
            open_interest=open_interest,
            funding_rate=funding_rate,
            intraday_series=build_intraday_series(short_candles, settings.series_window),
            longer_term_context=build_longer_term_context(
                long_candles, settings.series_window
            ),
        )
