"""Configuration system using pydantic-settings with environment variable loading.

AppSettings is constructed once at process start (see ``tradescope.main``) and the
relevant sub-settings are handed to each component explicitly.
"""

from datetime import timedelta

from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketDataSettings(BaseSettings):
    """Market data retrieval and snapshot assembly parameters."""

    model_config = SettingsConfigDict(env_prefix="MARKET_")

    quote_asset: str = "USDT"

    # Short-interval feed drives current indicators and the intraday series
    short_interval: str = "3m"
    short_limit: int = 50  # enough history for MACD (26) plus the series window
    short_change_offset: int = 21  # 21 x 3m candles back ~= 1h

    # Long-interval feed drives the longer-term context
    long_interval: str = "4h"
    long_limit: int = 60
    long_change_offset: int = 2  # previous 4h candle

    series_window: int = 10  # trailing candles covered by per-candle series

    request_timeout_ms: int = 10_000
    enable_rate_limit: bool = True


class LedgerSettings(BaseSettings):
    """Decision ledger storage settings."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    log_dir: str = "decision_logs"
    retention_days: int = 30
    prune_interval: timedelta = timedelta(minutes=5)


class AnalysisSettings(BaseSettings):
    """Trade reconstruction and performance analysis settings."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    lookback_cycles: int = 100
    prime_factor: int = 3  # replay prime_factor x lookback cycles to seed open positions
    recent_trades_limit: int = 10


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8080
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    market_data: MarketDataSettings = MarketDataSettings()
    ledger: LedgerSettings = LedgerSettings()
    analysis: AnalysisSettings = AnalysisSettings()
    api: ApiSettings = ApiSettings()
