"""Tests for PositionReconstructor and windowed reconstruction.

Covers open/close pairing per (symbol, side), pnl formulas for both sides,
unmatched closes, overwritten opens, failed actions, and priming from history
that precedes the analysis window.
"""

from datetime import datetime, timedelta, timezone

import pytest

from tradescope.analytics.reconstruction import (
    PositionKey,
    PositionReconstructor,
    reconstruct_window,
)
from tradescope.ledger.models import ActionKind, DecisionAction, DecisionRecord, PositionSide

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _make_action(
    kind: ActionKind,
    price: float,
    symbol: str = "BTCUSDT",
    quantity: float = 0.1,
    leverage: int = 10,
    minutes: int = 0,
    success: bool = True,
) -> DecisionAction:
    return DecisionAction(
        action=kind,
        symbol=symbol,
        quantity=quantity,
        leverage=leverage,
        price=price,
        timestamp=T0 + timedelta(minutes=minutes),
        success=success,
    )


def _make_record(*actions: DecisionAction) -> DecisionRecord:
    return DecisionRecord(decisions=list(actions))


class TestApply:
    """Tests for PositionReconstructor.apply."""

    def test_long_round_trip(self) -> None:
        """Open long 0.1 BTC @ 50000 (10x), close @ 51000 one hour later."""
        rec = PositionReconstructor()
        assert rec.apply(_make_action(ActionKind.OPEN_LONG, 50000.0)) is None

        trade = rec.apply(_make_action(ActionKind.CLOSE_LONG, 51000.0, minutes=60))

        assert trade is not None
        assert trade.symbol == "BTCUSDT"
        assert trade.side is PositionSide.LONG
        assert trade.pnl == pytest.approx(100.0)
        assert trade.position_value == pytest.approx(5000.0)
        assert trade.margin_used == pytest.approx(500.0)
        assert trade.pnl_pct == pytest.approx(20.0)
        assert trade.duration == timedelta(hours=1)
        assert trade.open_time == T0
        assert trade.was_stop_loss is False
        assert rec.open_positions == {}

    def test_short_profit_when_price_falls(self) -> None:
        rec = PositionReconstructor()
        rec.apply(_make_action(ActionKind.OPEN_SHORT, 3000.0, "ETHUSDT", quantity=2, leverage=5))

        trade = rec.apply(
            _make_action(ActionKind.CLOSE_SHORT, 2900.0, "ETHUSDT", quantity=2, minutes=30)
        )

        assert trade is not None
        assert trade.side is PositionSide.SHORT
        assert trade.pnl == pytest.approx(200.0)
        assert trade.margin_used == pytest.approx(1200.0)
        assert trade.pnl_pct == pytest.approx(200.0 / 1200.0 * 100)

    def test_zero_leverage_gives_zero_margin_and_pct(self) -> None:
        rec = PositionReconstructor()
        rec.apply(_make_action(ActionKind.OPEN_LONG, 100.0, leverage=0))

        trade = rec.apply(_make_action(ActionKind.CLOSE_LONG, 110.0))

        assert trade is not None
        assert trade.margin_used == 0.0
        assert trade.pnl_pct == 0.0
        assert trade.pnl == pytest.approx(1.0)

    def test_unmatched_close_ignored(self) -> None:
        rec = PositionReconstructor()
        assert rec.apply(_make_action(ActionKind.CLOSE_LONG, 51000.0)) is None
        assert rec.open_positions == {}

    def test_close_must_match_side(self) -> None:
        rec = PositionReconstructor()
        rec.apply(_make_action(ActionKind.OPEN_LONG, 50000.0))

        assert rec.apply(_make_action(ActionKind.CLOSE_SHORT, 49000.0)) is None
        assert PositionKey("BTCUSDT", PositionSide.LONG) in rec.open_positions

    def test_second_open_overwrites_first(self) -> None:
        rec = PositionReconstructor()
        rec.apply(_make_action(ActionKind.OPEN_LONG, 50000.0))
        rec.apply(_make_action(ActionKind.OPEN_LONG, 52000.0, minutes=10))

        trade = rec.apply(_make_action(ActionKind.CLOSE_LONG, 53000.0, minutes=20))

        assert trade is not None
        assert trade.open_price == 52000.0
        assert trade.duration == timedelta(minutes=10)

    def test_long_and_short_tracked_independently(self) -> None:
        rec = PositionReconstructor()
        rec.apply(_make_action(ActionKind.OPEN_LONG, 100.0))
        rec.apply(_make_action(ActionKind.OPEN_SHORT, 100.0))

        assert set(rec.open_positions) == {
            PositionKey("BTCUSDT", PositionSide.LONG),
            PositionKey("BTCUSDT", PositionSide.SHORT),
        }

    def test_failed_actions_ignored(self) -> None:
        rec = PositionReconstructor()
        rec.apply(_make_action(ActionKind.OPEN_LONG, 50000.0, success=False))
        assert rec.open_positions == {}

        rec.apply(_make_action(ActionKind.OPEN_LONG, 50000.0))
        assert rec.apply(_make_action(ActionKind.CLOSE_LONG, 51000.0, success=False)) is None
        assert len(rec.open_positions) == 1

    def test_open_positions_is_read_only(self) -> None:
        rec = PositionReconstructor()
        rec.apply(_make_action(ActionKind.OPEN_LONG, 100.0))

        with pytest.raises(TypeError):
            rec.open_positions[PositionKey("X", PositionSide.LONG)] = None  # type: ignore[index]


class TestReplay:
    """Tests for replaying whole records."""

    def test_trades_in_replay_order(self) -> None:
        records = [
            _make_record(
                _make_action(ActionKind.OPEN_LONG, 100.0, "SOLUSDT"),
                _make_action(ActionKind.OPEN_SHORT, 3000.0, "ETHUSDT"),
            ),
            _make_record(_make_action(ActionKind.CLOSE_SHORT, 2950.0, "ETHUSDT", minutes=3)),
            _make_record(_make_action(ActionKind.CLOSE_LONG, 90.0, "SOLUSDT", minutes=6)),
        ]

        trades = PositionReconstructor().replay(records)

        assert [t.symbol for t in trades] == ["ETHUSDT", "SOLUSDT"]
        assert trades[0].pnl == pytest.approx(5.0)
        assert trades[1].pnl == pytest.approx(-1.0)

    def test_same_input_same_output(self) -> None:
        records = [
            _make_record(_make_action(ActionKind.OPEN_LONG, 100.0)),
            _make_record(_make_action(ActionKind.CLOSE_LONG, 105.0, minutes=3)),
        ]
        assert PositionReconstructor().replay(records) == PositionReconstructor().replay(records)


class TestReconstructWindow:
    """Tests for priming from history that precedes the window."""

    def test_open_before_window_is_matched(self) -> None:
        history = [
            _make_record(_make_action(ActionKind.OPEN_LONG, 50000.0)),
            _make_record(),
            _make_record(_make_action(ActionKind.CLOSE_LONG, 51000.0, minutes=60)),
        ]
        window = history[-1:]

        trades = reconstruct_window(window, history)

        assert len(trades) == 1
        assert trades[0].pnl == pytest.approx(100.0)

    def test_without_priming_close_is_dropped(self) -> None:
        window = [_make_record(_make_action(ActionKind.CLOSE_LONG, 51000.0))]
        assert reconstruct_window(window, window) == []

    def test_trades_closed_before_window_excluded(self) -> None:
        history = [
            _make_record(_make_action(ActionKind.OPEN_LONG, 100.0)),
            _make_record(_make_action(ActionKind.CLOSE_LONG, 110.0, minutes=3)),
            _make_record(_make_action(ActionKind.OPEN_SHORT, 100.0, minutes=6)),
            _make_record(_make_action(ActionKind.CLOSE_SHORT, 90.0, minutes=9)),
        ]

        trades = reconstruct_window(history[2:], history)

        assert len(trades) == 1
        assert trades[0].side is PositionSide.SHORT

    def test_open_and_close_inside_window(self) -> None:
        history = [
            _make_record(),
            _make_record(_make_action(ActionKind.OPEN_LONG, 100.0)),
            _make_record(_make_action(ActionKind.CLOSE_LONG, 120.0, minutes=3)),
        ]

        trades = reconstruct_window(history[1:], history)

        assert len(trades) == 1
        assert trades[0].pnl == pytest.approx(2.0)
