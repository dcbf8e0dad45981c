"""
Structured logging setup.

JSON output for production, console rendering for development. Components
take their logger as a constructor argument so tests can hand in
``null_logger()``.
"""
import logging
import sys

import structlog


def configure_logging(level: str = "info", fmt: str = "pretty") -> None:
    """Configure structlog on top of the stdlib logging module."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _drop_event(logger, method_name, event_dict):
    raise structlog.DropEvent


def null_logger() -> structlog.typing.BindableLogger:
    """Return a logger that silently discards every event."""
    return structlog.wrap_logger(structlog.ReturnLogger(), processors=[_drop_event])
