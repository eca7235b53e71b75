"""Structured logging helpers shared by the service and the CLI."""

from __future__ import annotations

import logging
import threading
from typing import Any

import structlog
from structlog.typing import EventDict, FilteringBoundLogger, WrappedLogger

from .config import get_settings

_configured = False


def configure_logging(level: int | str | None = None, *, json: bool = True, force: bool = False) -> None:
    """Initialise standard logging and structlog configuration.

    Args:
        level: Log level override; defaults to the configured ``log_level``.
        json: Render JSON lines when true, otherwise the console renderer.
        force: Reconfigure even if logging was already set up.

    """
    global _configured  # noqa: PLW0603
    if _configured and not force:
        return

    configured_level = _resolve_level(level or get_settings().log_level_value)

    logging.basicConfig(
        level=configured_level,
        format="%(message)s",
        force=True,
    )

    renderer: Any = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            _add_thread_name,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(configured_level),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> FilteringBoundLogger:
    """Return a configured structlog logger.

    Args:
        name: The logger name.

    Returns:
        A configured structlog logger.

    """
    configure_logging()
    return structlog.get_logger(name)


def _add_thread_name(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    # the scheduling strategy shows up as the thread a query ran on
    event_dict.setdefault("thread", threading.current_thread().name)
    return event_dict


def _resolve_level(raw_level: Any) -> int:
    """Convert a string or logging level constant into an integer level.

    Args:
        raw_level: The raw log level value.

    Returns:
        The integer log level.

    """
    if isinstance(raw_level, int):
        return raw_level
    level_names = logging.getLevelNamesMapping()
    return level_names.get(str(raw_level).upper(), logging.INFO)
