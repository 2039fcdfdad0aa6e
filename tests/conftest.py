"""Shared test fixtures for tradescope."""

from pathlib import Path

import pytest

from tradescope.config import AnalysisSettings, AppSettings, LedgerSettings, MarketDataSettings
from tradescope.ledger.store import DecisionLedger


@pytest.fixture
def mock_settings(tmp_path: Path) -> AppSettings:
    """Return AppSettings with test defaults and a temporary ledger directory."""
    return AppSettings(
        log_level="DEBUG",
        market_data=MarketDataSettings(),
        ledger=LedgerSettings(log_dir=str(tmp_path / "decision_logs")),
        analysis=AnalysisSettings(lookback_cycles=5, prime_factor=3),
    )


@pytest.fixture
def ledger(tmp_path: Path) -> DecisionLedger:
    """Fresh DecisionLedger in a temporary directory."""
    return DecisionLedger(tmp_path / "decision_logs")
