"""Technical indicators over ordered candle sequences: EMA, MACD, RSI, ATR.

All functions are pure and deterministic. None of them raise on short input:
when there is not enough history for the requested period they return 0.0,
which callers must read as "undefined" rather than as a computed zero.

Sequences are ordered oldest first.
"""

from collections.abc import Sequence

from tradescope.market_data.models import Candle

MACD_FAST = 12
MACD_SLOW = 26


def ema(candles: Sequence[Candle], period: int) -> float:
    """Exponential Moving Average of closes.

    Seeded with the simple average of the first ``period`` closes, then:
        multiplier = 2 / (period + 1)
        EMA = (close - EMA) * multiplier + EMA

    Args:
        candles: Candles ordered oldest first.
        period: Smoothing period.

    Returns:
        The EMA after the last candle, or 0.0 if ``len(candles) < period``.
    """
    if period <= 0 or len(candles) < period:
        return 0.0

    closes = [c.close for c in candles]
    value = sum(closes[:period]) / period
    multiplier = 2.0 / (period + 1)

    for price in closes[period:]:
        value = (price - value) * multiplier + value

    return value


def macd(candles: Sequence[Candle]) -> float:
    """MACD line: EMA(12) - EMA(26). Returns 0.0 with fewer than 26 candles."""
    if len(candles) < MACD_SLOW:
        return 0.0
    return ema(candles, MACD_FAST) - ema(candles, MACD_SLOW)


def rsi(candles: Sequence[Candle], period: int) -> float:
    """Relative Strength Index with Wilder smoothing.

    Average gain/loss are seeded from the first ``period`` close-to-close deltas
    and then smoothed as ``avg = (avg * (period - 1) + new) / period``.

    Args:
        candles: Candles ordered oldest first.
        period: RSI period.

    Returns:
        RSI in [0, 100]; 100.0 when the average loss is zero; 0.0 if
        ``len(candles) <= period``.
    """
    if period <= 0 or len(candles) <= period:
        return 0.0

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = candles[i].close - candles[i - 1].close
        if change > 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period

    for i in range(period + 1, len(candles)):
        change = candles[i].close - candles[i - 1].close
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def true_range(candle: Candle, prev_close: float) -> float:
    """Largest of high-low, |high - prev_close| and |low - prev_close|."""
    return max(
        candle.high - candle.low,
        abs(candle.high - prev_close),
        abs(candle.low - prev_close),
    )


def atr(candles: Sequence[Candle], period: int) -> float:
    """Average True Range with Wilder smoothing.

    The first candle has no previous close and contributes a true range of 0.
    The seed is the mean of true ranges 1..period; later true ranges are folded
    in with ``atr = (atr * (period - 1) + tr) / period``.

    Returns:
        ATR (always >= 0), or 0.0 if ``len(candles) <= period``.
    """
    if period <= 0 or len(candles) <= period:
        return 0.0

    trs = [0.0]
    for i in range(1, len(candles)):
        trs.append(true_range(candles[i], candles[i - 1].close))

    value = sum(trs[1 : period + 1]) / period
    for tr in trs[period + 1 :]:
        value = (value * (period - 1) + tr) / period

    return value
