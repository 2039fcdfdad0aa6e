"""Data models for candles and assembled market snapshots.

Prices and volumes are floats: indicator math runs in binary floating point and
uses 0.0 as the "not enough history" sentinel.
"""

from dataclasses import asdict, dataclass, field

from tradescope.exceptions import InsufficientDataError, ParseError

#: Number of fields in a Binance kline row (the trailing "ignore" column included).
_BINANCE_KLINE_FIELDS = 12


def _parse_float(value: object, name: str) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ParseError(f"kline field {name!r} is not numeric: {value!r}") from e


def _parse_int(value: object, name: str) -> int:
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise ParseError(f"kline field {name!r} is not an integer: {value!r}") from e


@dataclass(frozen=True)
class Candle:
    """A single OHLCV candle. Sequences are ordered oldest first."""

    open_time: int  # epoch millis
    open: float
    high: float
    low: float
    close: float
    volume: float
    close_time: int  # epoch millis
    quote_volume: float = 0.0
    trade_count: int = 0
    taker_buy_base_volume: float = 0.0
    taker_buy_quote_volume: float = 0.0

    @classmethod
    def from_binance_row(cls, row: list) -> "Candle":
        """Parse a Binance kline array.

        Binance encodes prices and volumes as strings:
        ``[open_time, open, high, low, close, volume, close_time, quote_volume,
        trades, taker_buy_base, taker_buy_quote, ignore]``.

        Raises:
            ParseError: If the row is too short or a field is not numeric.
        """
        if not isinstance(row, (list, tuple)) or len(row) < _BINANCE_KLINE_FIELDS - 1:
            raise ParseError(f"malformed kline row: {row!r}")

        return cls(
            open_time=_parse_int(row[0], "open_time"),
            open=_parse_float(row[1], "open"),
            high=_parse_float(row[2], "high"),
            low=_parse_float(row[3], "low"),
            close=_parse_float(row[4], "close"),
            volume=_parse_float(row[5], "volume"),
            close_time=_parse_int(row[6], "close_time"),
            quote_volume=_parse_float(row[7], "quote_volume"),
            trade_count=_parse_int(row[8], "trade_count"),
            taker_buy_base_volume=_parse_float(row[9], "taker_buy_base_volume"),
            taker_buy_quote_volume=_parse_float(row[10], "taker_buy_quote_volume"),
        )


@dataclass
class OpenInterest:
    """Open interest for a perpetual contract.

    ``average`` is ``latest * 0.999``, an approximation rather than a true moving
    average (the upstream endpoint only reports the latest value).
    """

    latest: float
    average: float

    @classmethod
    def from_latest(cls, latest: float) -> "OpenInterest":
        return cls(latest=latest, average=latest * 0.999)


@dataclass
class IntradaySeries:
    """Per-candle indicator series over the tail of the short-interval feed.

    Each list only gains entries once its indicator has enough history, so the
    lists can be shorter than ``mid_prices``.
    """

    mid_prices: list[float] = field(default_factory=list)
    ema20_values: list[float] = field(default_factory=list)
    macd_values: list[float] = field(default_factory=list)
    rsi7_values: list[float] = field(default_factory=list)
    rsi14_values: list[float] = field(default_factory=list)


@dataclass
class LongerTermContext:
    """Indicators over the full long-interval feed."""

    ema20: float = 0.0
    ema50: float = 0.0
    atr3: float = 0.0
    atr14: float = 0.0
    current_volume: float = 0.0
    average_volume: float = 0.0
    macd_values: list[float] = field(default_factory=list)
    rsi14_values: list[float] = field(default_factory=list)


@dataclass
class MarketSnapshot:
    """Structured market view for one symbol.

    Raises:
        InsufficientDataError: On construction when ``current_price`` is not positive.
    """

    symbol: str
    current_price: float
    price_change_1h: float = 0.0
    price_change_4h: float = 0.0
    current_ema20: float = 0.0
    current_macd: float = 0.0
    current_rsi7: float = 0.0
    open_interest: OpenInterest | None = None
    funding_rate: float | None = None
    intraday_series: IntradaySeries | None = None
    longer_term_context: LongerTermContext | None = None

    def __post_init__(self) -> None:
        if not self.current_price > 0:
            raise InsufficientDataError(
                self.symbol, "current price", f"got {self.current_price!r}"
            )

    def to_dict(self) -> dict:
        """Serialize to primitive fields, dropping absent optional sections."""
        data = asdict(self)
        return {key: value for key, value in data.items() if value is not None}
