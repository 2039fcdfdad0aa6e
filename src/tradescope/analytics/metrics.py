"""Performance metric calculations over reconstructed trades.

Pure float analytics: win_rate, avg_win, avg_loss, profit_factor,
sharpe_ratio, symbol_performance. A trade wins when pnl > 0; every other
trade (including break-even) counts as a loss.
"""

import math
from collections import defaultdict

from tradescope.analytics.models import SymbolPerformance, TradeOutcome


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def winning(trades: list[TradeOutcome]) -> list[TradeOutcome]:
    return [t for t in trades if t.pnl > 0]


def losing(trades: list[TradeOutcome]) -> list[TradeOutcome]:
    return [t for t in trades if t.pnl <= 0]


def win_rate(trades: list[TradeOutcome]) -> float:
    """Fraction of winning trades, 0.0 for no trades."""
    if not trades:
        return 0.0
    return len(winning(trades)) / len(trades)


def avg_win(trades: list[TradeOutcome]) -> float:
    """Mean pnl of winning trades, 0.0 if none."""
    return _mean([t.pnl for t in winning(trades)])


def avg_loss(trades: list[TradeOutcome]) -> float:
    """Mean pnl of losing trades (<= 0), 0.0 if none."""
    return _mean([t.pnl for t in losing(trades)])


def profit_factor(trades: list[TradeOutcome]) -> float:
    """Gross winning pnl divided by absolute gross losing pnl.

    Returns:
        ``math.inf`` when there is winning pnl but no losing pnl, 0.0 when
        there is neither.
    """
    gross_win = sum(t.pnl for t in winning(trades))
    gross_loss = abs(sum(t.pnl for t in losing(trades)))
    if gross_loss == 0:
        return math.inf if gross_win > 0 else 0.0
    return gross_win / gross_loss


def sharpe_ratio(trades: list[TradeOutcome]) -> float:
    """Mean pnl_pct divided by its sample standard deviation (N-1 denominator).

    Not annualized. Returns 0.0 for fewer than 2 trades or zero deviation.
    """
    if len(trades) < 2:
        return 0.0

    returns = [t.pnl_pct for t in trades]
    mean = _mean(returns)
    variance = sum((r - mean) ** 2 for r in returns) / (len(returns) - 1)
    std_dev = math.sqrt(variance)

    if std_dev == 0:
        return 0.0
    return mean / std_dev


def symbol_performance(trades: list[TradeOutcome]) -> dict[str, SymbolPerformance]:
    """Group trades by symbol and compute per-symbol statistics."""
    grouped: dict[str, list[TradeOutcome]] = defaultdict(list)
    for trade in trades:
        grouped[trade.symbol].append(trade)

    result: dict[str, SymbolPerformance] = {}
    for symbol in sorted(grouped):
        group = grouped[symbol]
        total_pnl = sum(t.pnl for t in group)
        result[symbol] = SymbolPerformance(
            symbol=symbol,
            total_trades=len(group),
            winning_trades=len(winning(group)),
            losing_trades=len(losing(group)),
            win_rate=win_rate(group),
            total_pnl=total_pnl,
            avg_pnl=total_pnl / len(group),
        )
    return result


def best_and_worst_symbol(stats: dict[str, SymbolPerformance]) -> tuple[str, str]:
    """Symbols with the highest and lowest total pnl.

    Ties go to the alphabetically first symbol. Returns ``("", "")`` when empty.
    """
    if not stats:
        return "", ""
    best = min(stats.values(), key=lambda s: (-s.total_pnl, s.symbol))
    worst = min(stats.values(), key=lambda s: (s.total_pnl, s.symbol))
    return best.symbol, worst.symbol
