"""Fixed-format human-readable rendering of a MarketSnapshot.

Every line is followed by a blank line. Sections without data are omitted.
"""

from collections.abc import Iterable

from tradescope.market_data.models import MarketSnapshot


def format_series(values: Iterable[float]) -> str:
    """Render floats as ``[1.234, 5.678]``."""
    return "[" + ", ".join(f"{v:.3f}" for v in values) + "]"


def format_snapshot(snapshot: MarketSnapshot) -> str:
    lines = [
        f"current_price = {snapshot.current_price:.2f}, "
        f"current_ema20 = {snapshot.current_ema20:.3f}, "
        f"current_macd = {snapshot.current_macd:.3f}, "
        f"current_rsi (7 period) = {snapshot.current_rsi7:.3f}",
        f"In addition, here is the latest {snapshot.symbol} open interest "
        f"and funding rate for perps:",
    ]

    oi = snapshot.open_interest
    if oi is not None:
        lines.append(f"Open Interest: Latest: {oi.latest:.2f} Average: {oi.average:.2f}")

    if snapshot.funding_rate is not None:
        lines.append(f"Funding Rate: {snapshot.funding_rate:.2e}")

    intraday = snapshot.intraday_series
    if intraday is not None:
        lines.extend(
            [
                "Intraday series (3‑minute intervals, oldest → latest):",
                f"Mid prices: {format_series(intraday.mid_prices)}",
                f"EMA indicators (20‑period): {format_series(intraday.ema20_values)}",
                f"MACD indicators: {format_series(intraday.macd_values)}",
                f"RSI indicators (7‑Period): {format_series(intraday.rsi7_values)}",
                f"RSI indicators (14‑Period): {format_series(intraday.rsi14_values)}",
            ]
        )

    ctx = snapshot.longer_term_context
    if ctx is not None:
        lines.extend(
            [
                "Longer‑term context (4‑hour timeframe):",
                f"20‑Period EMA: {ctx.ema20:.3f} vs. 50‑Period EMA: {ctx.ema50:.3f}",
                f"3‑Period ATR: {ctx.atr3:.3f} vs. 14‑Period ATR: {ctx.atr14:.3f}",
                f"Current Volume: {ctx.current_volume:.3f} "
                f"vs. Average Volume: {ctx.average_volume:.3f}",
                f"MACD indicators: {format_series(ctx.macd_values)}",
                f"RSI indicators (14‑Period): {format_series(ctx.rsi14_values)}",
            ]
        )

    return "".join(f"{line}\n\n" for line in lines)
