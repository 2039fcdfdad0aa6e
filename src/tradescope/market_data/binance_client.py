"""Binance public market data client via ccxt async.

Uses ccxt's raw endpoint methods rather than the unified ``fetch_ohlcv`` so the
full 12-column kline payload (quote volume, trade count, taker volumes) is
preserved:

- spot klines:        GET /api/v3/klines
- open interest:      GET /fapi/v1/openInterest
- funding rate:       GET /fapi/v1/premiumIndex

Open interest and funding rate only exist for perpetual contracts. When Binance
answers with an error status for those (e.g. a spot-only symbol), ccxt raises an
``ExchangeError`` subclass and the value is reported as unavailable. Network
failures are always hard errors.
"""

import ccxt.async_support as ccxt_async

from tradescope.config import MarketDataSettings
from tradescope.exceptions import ParseError, TransportError
from tradescope.logging import get_logger
from tradescope.market_data.client import MarketDataClient
from tradescope.market_data.models import Candle, OpenInterest

logger = get_logger(__name__)


class BinanceMarketDataClient(MarketDataClient):
    """Concrete Binance market data client using ccxt async."""

    def __init__(self, settings: MarketDataSettings) -> None:
        self._settings = settings
        self._exchange = ccxt_async.binance(
            {
                "enableRateLimit": settings.enable_rate_limit,
                "timeout": settings.request_timeout_ms,
            }
        )

    @property
    def exchange(self) -> ccxt_async.binance:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def close(self) -> None:
        """Clean up ccxt async resources. Must be called to avoid leaking the session."""
        await self._exchange.close()
        logger.info("binance_client_closed")

    async def fetch_klines(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        try:
            rows = await self._exchange.publicGetKlines(
                {"symbol": symbol, "interval": interval, "limit": limit}
            )
        except ccxt_async.BaseError as e:
            raise TransportError(
                f"failed to fetch {interval} klines for {symbol}: {e}"
            ) from e

        if not isinstance(rows, list):
            raise ParseError(f"unexpected klines payload for {symbol}: {rows!r}")

        candles = [Candle.from_binance_row(row) for row in rows]
        logger.debug(
            "klines_fetched",
            symbol=symbol,
            interval=interval,
            count=len(candles),
        )
        return candles

    async def fetch_open_interest(self, symbol: str) -> OpenInterest | None:
        payload = await self._fetch_optional(
            self._exchange.fapiPublicGetOpenInterest, symbol, "open_interest"
        )
        if payload is None:
            return None
        latest = self._parse_field(payload, "openInterest", symbol)
        return OpenInterest.from_latest(latest)

    async def fetch_funding_rate(self, symbol: str) -> float | None:
        payload = await self._fetch_optional(
            self._exchange.fapiPublicGetPremiumIndex, symbol, "funding_rate"
        )
        if payload is None:
            return None
        return self._parse_field(payload, "lastFundingRate", symbol)

    async def _fetch_optional(self, endpoint, symbol: str, series: str) -> dict | None:
        """Call a perpetual-only endpoint, mapping upstream rejections to None."""
        try:
            payload = await endpoint({"symbol": symbol})
        except ccxt_async.NetworkError as e:
            raise TransportError(f"failed to fetch {series} for {symbol}: {e}") from e
        except ccxt_async.ExchangeError as e:
            logger.info(
                "optional_series_unavailable",
                symbol=symbol,
                series=series,
                error=str(e),
            )
            return None
        except ccxt_async.BaseError as e:
            raise TransportError(f"failed to fetch {series} for {symbol}: {e}") from e

        if not isinstance(payload, dict):
            raise ParseError(f"unexpected {series} payload for {symbol}: {payload!r}")
        return payload

    @staticmethod
    def _parse_field(payload: dict, key: str, symbol: str) -> float:
        raw = payload.get(key)
        try:
            return float(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            raise ParseError(f"{key} for {symbol} is not numeric: {raw!r}") from e
