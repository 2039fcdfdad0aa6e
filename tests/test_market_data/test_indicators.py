"""Tests for the indicator library (EMA, MACD, RSI, ATR).

Covers the 0.0 insufficient-history sentinel, known values, bounds, and
idempotence.
"""

import pytest

from tradescope.market_data import indicators
from tradescope.market_data.models import Candle


def _candle(close: float, high: float | None = None, low: float | None = None, i: int = 0) -> Candle:
    return Candle(
        open_time=i * 60_000,
        open=close,
        high=close if high is None else high,
        low=close if low is None else low,
        close=close,
        volume=1.0,
        close_time=(i + 1) * 60_000 - 1,
    )


def _candles(closes: list[float]) -> list[Candle]:
    return [_candle(c, i=i) for i, c in enumerate(closes)]


def _wavy_closes(n: int) -> list[float]:
    """Deterministic up/down price path."""
    return [100.0 + ((i * 37) % 11) - 5 + i * 0.1 for i in range(n)]


class TestEma:
    """Tests for ema(candles, period)."""

    def test_known_values_period_3(self) -> None:
        """Seed = (1+2+3)/3 = 2; then (4-2)*0.5+2 = 3; then (5-3)*0.5+3 = 4."""
        assert indicators.ema(_candles([1, 2, 3, 4, 5]), 3) == 4.0

    def test_seed_only_when_length_equals_period(self) -> None:
        assert indicators.ema(_candles([2, 4, 6]), 3) == 4.0

    @pytest.mark.parametrize("length", [0, 1, 19])
    def test_insufficient_history_returns_zero(self, length: int) -> None:
        assert indicators.ema(_candles([10.0] * length), 20) == 0.0

    def test_constant_series_equals_constant(self) -> None:
        assert indicators.ema(_candles([42.0] * 30), 20) == 42.0


class TestMacd:
    """Tests for macd(candles)."""

    def test_fewer_than_26_candles_returns_zero(self) -> None:
        assert indicators.macd(_candles(list(range(1, 26)))) == 0.0

    def test_equals_ema12_minus_ema26(self) -> None:
        candles = _candles(_wavy_closes(40))
        expected = indicators.ema(candles, 12) - indicators.ema(candles, 26)
        assert indicators.macd(candles) == expected

    def test_rising_prices_positive(self) -> None:
        assert indicators.macd(_candles([float(i) for i in range(1, 41)])) > 0

    def test_flat_prices_zero(self) -> None:
        assert indicators.macd(_candles([100.0] * 30)) == 0.0


class TestRsi:
    """Tests for rsi(candles, period)."""

    @pytest.mark.parametrize("length", [0, 7, 8])
    def test_length_at_most_period_returns_zero(self, length: int) -> None:
        candles = _candles([float(i) for i in range(length)])
        assert indicators.rsi(candles, 8) == 0.0

    def test_known_value_with_wilder_smoothing(self) -> None:
        """Deltas +1, -1, +1 with period 2.

        Seed: avg_gain = 0.5, avg_loss = 0.5.
        Smoothed: avg_gain = (0.5 + 1) / 2 = 0.75, avg_loss = 0.5 / 2 = 0.25.
        RS = 3 -> RSI = 100 - 100/4 = 75.
        """
        assert indicators.rsi(_candles([1, 2, 1, 2]), 2) == 75.0

    def test_only_gains_returns_100(self) -> None:
        assert indicators.rsi(_candles([float(i) for i in range(20)]), 14) == 100.0

    def test_no_changes_returns_100(self) -> None:
        """No losses at all (flat series) still means avg_loss == 0."""
        assert indicators.rsi(_candles([50.0] * 20), 7) == 100.0

    def test_only_losses_returns_zero(self) -> None:
        assert indicators.rsi(_candles([float(20 - i) for i in range(20)]), 14) == 0.0

    @pytest.mark.parametrize("period", [2, 7, 14])
    def test_bounded_between_0_and_100(self, period: int) -> None:
        closes = _wavy_closes(60)
        for end in range(period + 1, len(closes) + 1):
            value = indicators.rsi(_candles(closes[:end]), period)
            assert 0.0 <= value <= 100.0


class TestAtr:
    """Tests for atr(candles, period)."""

    def test_length_at_most_period_returns_zero(self) -> None:
        candles = [_candle(10, 11, 9, i) for i in range(14)]
        assert indicators.atr(candles, 14) == 0.0

    def test_known_value(self) -> None:
        """True ranges [0, 2, 2, 4]; seed = (2 + 2) / 2 = 2; then (2*1 + 4) / 2 = 3."""
        candles = [
            _candle(9, 10, 8, 0),
            _candle(10, 11, 9, 1),
            _candle(11, 12, 10, 2),
            _candle(14, 15, 11, 3),
        ]
        assert indicators.atr(candles, 2) == 3.0

    def test_true_range_uses_previous_close_gap(self) -> None:
        candle = _candle(9.5, 10, 9)
        assert indicators.true_range(candle, prev_close=5) == 5.0
        assert indicators.true_range(candle, prev_close=14) == 5.0
        assert indicators.true_range(candle, prev_close=9.5) == 1.0

    def test_never_negative(self) -> None:
        closes = _wavy_closes(40)
        candles = [_candle(c, c + 1.5, c - 0.5, i) for i, c in enumerate(closes)]
        for period in (3, 14):
            assert indicators.atr(candles, period) >= 0.0


class TestDeterminism:
    """Indicator functions are pure: same input, bit-identical output."""

    def test_repeated_calls_identical(self) -> None:
        closes = _wavy_closes(50)
        candles = [_candle(c, c + 1, c - 1, i) for i, c in enumerate(closes)]
        assert indicators.ema(candles, 20) == indicators.ema(candles, 20)
        assert indicators.macd(candles) == indicators.macd(candles)
        assert indicators.rsi(candles, 7) == indicators.rsi(candles, 7)
        assert indicators.atr(candles, 14) == indicators.atr(candles, 14)
