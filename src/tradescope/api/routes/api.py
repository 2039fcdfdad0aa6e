"""JSON API endpoints: market snapshots, performance analysis, and ledger views."""

from __future__ import annotations

import asyncio
from typing import Literal

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from tradescope.exceptions import InsufficientDataError, ParseError, TransportError
from tradescope.market_data.report import format_snapshot

log = structlog.get_logger(__name__)

router = APIRouter()


def _error(status_code: int, symbol: str, message: str, **extra: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "symbol": symbol, **extra},
    )


@router.get("/snapshot/{symbol}")
async def get_snapshot(
    request: Request,
    symbol: str,
    format: Literal["json", "text"] = "json",
) -> Response:
    """Build a market snapshot; ``?format=text`` returns the fixed-format report."""
    builder = request.app.state.snapshot_builder

    try:
        snapshot = await builder.build(symbol)
    except InsufficientDataError as e:
        return _error(
            422,
            e.symbol,
            f"Not enough market data for {e.symbol}: missing {e.series}",
            series=e.series,
        )
    except (TransportError, ParseError) as e:
        log.warning("snapshot_request_failed", symbol=symbol, error=str(e))
        return _error(502, symbol.upper(), f"Upstream market data unavailable: {e}")

    if format == "text":
        return PlainTextResponse(format_snapshot(snapshot))
    return JSONResponse(content=snapshot.to_dict())


@router.get("/performance")
async def get_performance(
    request: Request,
    lookback: int | None = Query(default=None, ge=1),
) -> JSONResponse:
    """Performance analysis over the last ``lookback`` decision cycles."""
    analyzer = request.app.state.analyzer
    analysis = await asyncio.to_thread(analyzer.analyze_recent, lookback)
    return JSONResponse(content=analysis.to_dict())


@router.get("/ledger/statistics")
async def get_ledger_statistics(request: Request) -> JSONResponse:
    """Cycle and action counts across the whole ledger."""
    ledger = request.app.state.ledger
    stats = await asyncio.to_thread(ledger.statistics)
    return JSONResponse(
        content={
            "total_cycles": stats.total_cycles,
            "successful_cycles": stats.successful_cycles,
            "failed_cycles": stats.failed_cycles,
            "total_open_positions": stats.total_open_positions,
            "total_close_positions": stats.total_close_positions,
        }
    )


@router.get("/ledger/recent")
async def get_recent_records(
    request: Request,
    n: int = Query(default=10, ge=1, le=500),
) -> JSONResponse:
    """The n most recent decision records, oldest first."""
    ledger = request.app.state.ledger
    records = await asyncio.to_thread(ledger.read_recent, n)
    return JSONResponse(content=[r.model_dump(mode="json") for r in records])
