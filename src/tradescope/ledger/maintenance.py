"""Periodic ledger retention.

Runs alongside the API server and removes decision records older than the
configured retention period. Pruning touches every file in the log directory,
so the loop runs it in a worker thread.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from tradescope.ledger.store import DecisionLedger
from tradescope.logging import get_logger

logger = get_logger(__name__)


def prune_expired(ledger: DecisionLedger, retention_days: int) -> int:
    """Remove records older than ``retention_days``. Returns the number removed."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    return ledger.prune(cutoff)


async def ledger_maintenance_loop(
    ledger: DecisionLedger,
    retention_days: int,
    interval: timedelta,
) -> None:
    """Prune expired records every ``interval`` until cancelled."""
    logger.info(
        "ledger_maintenance_started",
        retention_days=retention_days,
        interval_seconds=interval.total_seconds(),
    )

    while True:
        try:
            await asyncio.to_thread(prune_expired, ledger, retention_days)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("ledger_maintenance_error", exc_info=True)
        await asyncio.sleep(interval.total_seconds())
