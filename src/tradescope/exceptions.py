"""Exception taxonomy for tradescope.

Every component fails with one of these kinds rather than a chain of wrapped
context strings. Indicator functions never raise; they signal short history
with a 0.0 sentinel instead.
"""


class TradescopeError(Exception):
    """Base exception for all tradescope errors."""


class TransportError(TradescopeError):
    """Raised when an upstream market data source cannot be reached or errors out."""


class ParseError(TradescopeError):
    """Raised when an upstream payload contains malformed numbers or structure."""


class InsufficientDataError(TradescopeError):
    """Raised when a required series has too little history to build a result."""

    def __init__(self, symbol: str, series: str, detail: str = "") -> None:
        self.symbol = symbol
        self.series = series
        self.detail = detail
        message = f"insufficient data for {symbol}: {series}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class RecordValidationError(TradescopeError):
    """Raised when a persisted decision record cannot be read back."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"invalid decision record {path}: {reason}")
