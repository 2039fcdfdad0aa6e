"""Reconstruct closed trades by replaying decision actions.

Open positions are tracked per (symbol, side). A successful open action
(re)creates the entry for its key, overwriting any unmatched earlier open: the
log is taken as exchange truth. A successful close action consumes the entry
for its key and yields a TradeOutcome. A close with no entry is a windowing
artifact (its open predates the replayed history) and is ignored.

When only the most recent N cycles are analyzed, opens from before the window
would be lost. ``reconstruct_window`` first primes the open-position state by
replaying the older history that precedes the window, discarding the trades
that history produces.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import NamedTuple

from tradescope.analytics.models import TradeOutcome
from tradescope.ledger.models import DecisionAction, DecisionRecord, PositionSide
from tradescope.logging import get_logger

logger = get_logger(__name__)


class PositionKey(NamedTuple):
    symbol: str
    side: PositionSide


@dataclass
class OpenPosition:
    """Entry data for a position awaiting its close."""

    open_price: float
    open_time: datetime
    quantity: float
    leverage: int


def compute_outcome(
    key: PositionKey, position: OpenPosition, close: DecisionAction
) -> TradeOutcome:
    """Build the TradeOutcome for closing ``position`` at ``close.price``."""
    if key.side is PositionSide.LONG:
        pnl = position.quantity * (close.price - position.open_price)
    else:
        pnl = position.quantity * (position.open_price - close.price)

    position_value = position.quantity * position.open_price
    margin_used = position_value / position.leverage if position.leverage else 0.0
    pnl_pct = pnl / margin_used * 100.0 if margin_used > 0 else 0.0

    return TradeOutcome(
        symbol=key.symbol,
        side=key.side,
        quantity=position.quantity,
        leverage=position.leverage,
        open_price=position.open_price,
        close_price=close.price,
        position_value=position_value,
        margin_used=margin_used,
        pnl=pnl,
        pnl_pct=pnl_pct,
        open_time=position.open_time,
        close_time=close.timestamp,
        duration=close.timestamp - position.open_time,
    )


class PositionReconstructor:
    """Pairs close actions with their open actions for one reconstruction pass.

    State is private to the instance; use a fresh reconstructor per analysis.
    """

    def __init__(self) -> None:
        self._open: dict[PositionKey, OpenPosition] = {}

    @property
    def open_positions(self) -> Mapping[PositionKey, OpenPosition]:
        """Read-only view of currently open positions."""
        return MappingProxyType(self._open)

    def apply(self, action: DecisionAction) -> TradeOutcome | None:
        """Apply one action. Failed actions are ignored.

        Returns:
            The completed trade when ``action`` closes a tracked position.
        """
        if not action.success:
            return None

        key = PositionKey(action.symbol, action.action.side)

        if action.action.is_open:
            self._open[key] = OpenPosition(
                open_price=action.price,
                open_time=action.timestamp,
                quantity=action.quantity,
                leverage=action.leverage,
            )
            return None

        position = self._open.pop(key, None)
        if position is None:
            logger.debug(
                "unmatched_close_ignored",
                symbol=action.symbol,
                side=key.side.value,
            )
            return None

        return compute_outcome(key, position, action)

    def replay(self, records: Iterable[DecisionRecord]) -> list[TradeOutcome]:
        """Apply every action of every record in order and collect closed trades."""
        outcomes = []
        for record in records:
            for action in record.decisions:
                outcome = self.apply(action)
                if outcome is not None:
                    outcomes.append(outcome)
        return outcomes

    def prime(self, records: Iterable[DecisionRecord]) -> None:
        """Replay history only to seed open-position state; trades are discarded."""
        discarded = self.replay(records)
        logger.debug(
            "reconstructor_primed",
            discarded_trades=len(discarded),
            open_positions=len(self._open),
        )


def reconstruct_window(
    window: list[DecisionRecord],
    history: list[DecisionRecord],
) -> list[TradeOutcome]:
    """Reconstruct trades closed inside ``window``.

    Args:
        window: The most recent N records, oldest first.
        history: A wider run of recent records, oldest first, ending with the
            same records as ``window``. The leading part that precedes the
            window seeds the open positions.

    Returns:
        Trades closed by actions inside the window, in replay order.
    """
    reconstructor = PositionReconstructor()
    if len(history) > len(window):
        reconstructor.prime(history[: len(history) - len(window)])
    return reconstructor.replay(window)
