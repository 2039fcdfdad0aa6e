"""Trade outcome and performance report models."""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta

from tradescope.ledger.models import PositionSide


@dataclass
class TradeOutcome:
    """A closed trade reconstructed from a matched open/close action pair."""

    symbol: str
    side: PositionSide
    quantity: float
    leverage: int
    open_price: float
    close_price: float
    position_value: float  # quantity * open_price
    margin_used: float  # position_value / leverage
    pnl: float
    pnl_pct: float  # pnl relative to margin, in percent
    open_time: datetime
    close_time: datetime
    duration: timedelta
    was_stop_loss: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["side"] = self.side.value
        data["open_time"] = self.open_time.isoformat()
        data["close_time"] = self.close_time.isoformat()
        data["duration"] = str(self.duration)
        return data


@dataclass
class SymbolPerformance:
    """Aggregate statistics for one symbol."""

    symbol: str
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    avg_pnl: float = 0.0


@dataclass
class PerformanceAnalysis:
    """Aggregate statistics over a set of trade outcomes.

    ``profit_factor`` is ``inf`` when there are winning trades but no losing
    pnl; JSON output renders that as null.
    """

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: float = 0.0
    sharpe_ratio: float = 0.0
    recent_trades: list[TradeOutcome] = field(default_factory=list)
    symbol_stats: dict[str, SymbolPerformance] = field(default_factory=dict)
    best_symbol: str = ""
    worst_symbol: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["recent_trades"] = [t.to_dict() for t in self.recent_trades]
        if not math.isfinite(self.profit_factor):
            data["profit_factor"] = None
        return data
