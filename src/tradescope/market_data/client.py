"""Abstract market data client interface.

The snapshot builder depends only on this interface, keeping exchange-specific
endpoints and payload formats in the concrete implementation.
"""

from abc import ABC, abstractmethod

from tradescope.market_data.models import Candle, OpenInterest


class MarketDataClient(ABC):
    """Read-only source of candles, open interest and funding rates."""

    @abstractmethod
    async def fetch_klines(self, symbol: str, interval: str, limit: int) -> list[Candle]:
        """Return up to ``limit`` candles for ``interval``, oldest first.

        Raises:
            TransportError: On network or upstream failure.
            ParseError: On a malformed payload.
        """
        ...

    @abstractmethod
    async def fetch_open_interest(self, symbol: str) -> OpenInterest | None:
        """Return open interest, or None when the symbol has no perpetual data."""
        ...

    @abstractmethod
    async def fetch_funding_rate(self, symbol: str) -> float | None:
        """Return the last funding rate, or None when the symbol has no perpetual data."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        ...
