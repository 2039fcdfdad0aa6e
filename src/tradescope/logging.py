"""Structured logging for tradescope.

structlog is the front end and stdlib logging is the sink: tradescope events
and records from ccxt, uvicorn or httpx all end up on one root handler and are
rendered by the same ``ProcessorFormatter``, so they share timestamps, levels
and any context bound with ``structlog.contextvars``.
"""

import logging
import os
from typing import TextIO

import structlog

#: Third-party loggers that are chatty at INFO and only useful when debugging.
_NOISY_LOGGERS = ("ccxt", "ccxt.base.exchange", "uvicorn.access", "httpx")


def _pre_chain() -> list[structlog.types.Processor]:
    """Enrichment applied to structlog events and to foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    log_level: str = "INFO",
    log_format: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through a single root handler.

    Args:
        log_level: Root log level name; unknown names fall back to INFO.
        log_format: ``"json"`` or ``"console"``. Defaults to the ``LOG_FORMAT``
            environment variable, then console.
        stream: Destination for rendered lines (stderr when omitted).
    """
    log_format = (log_format or os.environ.get("LOG_FORMAT", "console")).lower()
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # Third-party noise stays at WARNING unless the root level is stricter still.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
