"""Decision ledger -- append-only storage of per-cycle trading decisions."""

from tradescope.ledger.models import (
    AccountSnapshot,
    ActionKind,
    DecisionAction,
    DecisionRecord,
    LedgerStatistics,
    PositionSide,
    PositionSnapshot,
)
from tradescope.ledger.store import DecisionLedger, record_file_name

__all__ = [
    "AccountSnapshot",
    "ActionKind",
    "DecisionAction",
    "DecisionLedger",
    "DecisionRecord",
    "LedgerStatistics",
    "PositionSide",
    "PositionSnapshot",
    "record_file_name",
]
