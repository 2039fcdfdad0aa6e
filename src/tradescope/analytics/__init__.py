"""Trade reconstruction and performance analytics over the decision ledger."""

from tradescope.analytics.models import PerformanceAnalysis, SymbolPerformance, TradeOutcome
from tradescope.analytics.performance import PerformanceAnalyzer, analyze
from tradescope.analytics.reconstruction import (
    OpenPosition,
    PositionKey,
    PositionReconstructor,
    reconstruct_window,
)

__all__ = [
    "OpenPosition",
    "PerformanceAnalysis",
    "PerformanceAnalyzer",
    "PositionKey",
    "PositionReconstructor",
    "SymbolPerformance",
    "TradeOutcome",
    "analyze",
    "reconstruct_window",
]
