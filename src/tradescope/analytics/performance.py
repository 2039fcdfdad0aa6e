"""Performance analysis over reconstructed trades and over the decision ledger."""

from tradescope.analytics import metrics
from tradescope.analytics.models import PerformanceAnalysis, TradeOutcome
from tradescope.analytics.reconstruction import reconstruct_window
from tradescope.config import AnalysisSettings
from tradescope.ledger.store import DecisionLedger
from tradescope.logging import get_logger

logger = get_logger(__name__)


def analyze(trades: list[TradeOutcome], recent_limit: int = 10) -> PerformanceAnalysis:
    """Aggregate trade outcomes into a PerformanceAnalysis.

    Args:
        trades: Closed trades in replay (chronological) order.
        recent_limit: Number of trades kept in ``recent_trades``, newest first.
    """
    if not trades:
        return PerformanceAnalysis()

    symbol_stats = metrics.symbol_performance(trades)
    best_symbol, worst_symbol = metrics.best_and_worst_symbol(symbol_stats)
    recent = list(reversed(trades[-recent_limit:])) if recent_limit > 0 else []

    return PerformanceAnalysis(
        total_trades=len(trades),
        winning_trades=len(metrics.winning(trades)),
        losing_trades=len(metrics.losing(trades)),
        win_rate=metrics.win_rate(trades),
        avg_win=metrics.avg_win(trades),
        avg_loss=metrics.avg_loss(trades),
        profit_factor=metrics.profit_factor(trades),
        sharpe_ratio=metrics.sharpe_ratio(trades),
        recent_trades=recent,
        symbol_stats=symbol_stats,
        best_symbol=best_symbol,
        worst_symbol=worst_symbol,
    )


class PerformanceAnalyzer:
    """Analyzes trading performance over the most recent ledger cycles.

    Usage:
        analyzer = PerformanceAnalyzer(ledger, settings.analysis)
        report = analyzer.analyze_recent()
    """

    def __init__(self, ledger: DecisionLedger, settings: AnalysisSettings) -> None:
        self._ledger = ledger
        self._settings = settings

    def analyze_recent(self, lookback_cycles: int | None = None) -> PerformanceAnalysis:
        """Reconstruct and analyze trades closed in the last ``lookback_cycles`` cycles.

        Reads ``prime_factor * lookback_cycles`` records so that positions opened
        before the window can still be matched with closes inside it.
        """
        n = self._settings.lookback_cycles if lookback_cycles is None else lookback_cycles
        history = self._ledger.read_recent(n * max(self._settings.prime_factor, 1))
        window = history[-n:]
        if not window:
            logger.info("performance_no_records", lookback_cycles=n)
            return PerformanceAnalysis()

        trades = reconstruct_window(window, history)
        analysis = analyze(trades, self._settings.recent_trades_limit)

        logger.info(
            "performance_analyzed",
            lookback_cycles=n,
            records=len(window),
            history_records=len(history),
            total_trades=analysis.total_trades,
            win_rate=round(analysis.win_rate, 3),
        )
        return analysis
