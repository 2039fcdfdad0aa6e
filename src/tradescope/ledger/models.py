"""Decision ledger record models.

Records are pydantic models so they serialize to a readable JSON document per
cycle and fail validation loudly when a stored document is malformed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class PositionSide(str, Enum):
    """Position direction."""

    LONG = "long"
    SHORT = "short"


class ActionKind(str, Enum):
    """Kind of trading action taken in a decision cycle."""

    OPEN_LONG = "open_long"
    OPEN_SHORT = "open_short"
    CLOSE_LONG = "close_long"
    CLOSE_SHORT = "close_short"

    @property
    def side(self) -> PositionSide:
        if self in (ActionKind.OPEN_LONG, ActionKind.CLOSE_LONG):
            return PositionSide.LONG
        return PositionSide.SHORT

    @property
    def is_open(self) -> bool:
        return self in (ActionKind.OPEN_LONG, ActionKind.OPEN_SHORT)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountSnapshot(BaseModel):
    total_balance: float = 0.0
    available_balance: float = 0.0
    total_unrealized_profit: float = 0.0
    position_count: int = 0
    margin_used_pct: float = 0.0


class PositionSnapshot(BaseModel):
    """Exchange-reported position at decision time.

    ``side`` is kept as the exchange reports it (``LONG``, ``SHORT``, ``BOTH``,
    ...). It is informational only; trades are reconstructed from ``decisions``.
    """

    symbol: str
    side: str = ""
    position_amt: float = 0.0
    entry_price: float = 0.0
    mark_price: float = 0.0
    unrealized_profit: float = 0.0
    leverage: float = 1.0
    liquidation_price: float = 0.0


class DecisionAction(BaseModel):
    """One executed (or attempted) action. Only successful actions are replayed."""

    action: ActionKind
    symbol: str
    quantity: float = 0.0
    leverage: int = 1
    price: float = 0.0
    order_id: int = 0
    timestamp: datetime = Field(default_factory=_utcnow)
    success: bool = True
    error: str = ""


class DecisionRecord(BaseModel):
    """Everything logged for one decision cycle.

    ``cycle_number`` and ``timestamp`` are assigned by the ledger on append.
    """

    timestamp: datetime = Field(default_factory=_utcnow)
    cycle_number: int = 0
    system_prompt: str = ""
    input_prompt: str = ""
    cot_trace: str = ""
    decision_json: str = ""
    account_state: AccountSnapshot = Field(default_factory=AccountSnapshot)
    positions: list[PositionSnapshot] = Field(default_factory=list)
    candidate_coins: list[str] = Field(default_factory=list)
    decisions: list[DecisionAction] = Field(default_factory=list)
    execution_log: list[str] = Field(default_factory=list)
    success: bool = True
    error_message: str = ""


@dataclass
class LedgerStatistics:
    """Cycle and action counts over every readable record in the ledger."""

    total_cycles: int = 0
    successful_cycles: int = 0
    failed_cycles: int = 0
    total_open_positions: int = 0
    total_close_positions: int = 0
