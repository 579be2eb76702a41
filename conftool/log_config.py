"""Centralized structured logging configuration using structlog.

Log events go to stderr so that command output written to stdout (listings,
validation summaries) stays clean.

Example:
    >>> from conftool.log_config import configure_logging, get_logger
    >>> configure_logging(level="INFO")
    >>> logger = get_logger(__name__)
    >>> logger.info("option_enabled", option="CONFIG_NET")
"""

import logging
import sys
from typing import Any

import structlog

# -v count -> level; anything above the last entry is clamped
VERBOSITY_LEVELS = ("WARNING", "INFO", "DEBUG")


def verbosity_to_level(verbosity: int) -> str:
    """Map the number of ``-v`` flags to a logging level name.

    Args:
        verbosity: How often ``-v`` was passed

    Returns:
        WARNING for 0, INFO for 1, DEBUG for 2 or more
    """
    return VERBOSITY_LEVELS[min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)]


def configure_logging(level: str = "WARNING", json_logs: bool = False) -> None:
    """Configure structlog for conftool.

    Sets up structlog with processors for log levels, timestamps and
    exception rendering on top of the standard library logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, use JSONRenderer; if False, use ConsoleRenderer

    Raises:
        ValueError: If an invalid log level is provided
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        msg = f"Invalid log level: {level}"
        raise ValueError(msg)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(numeric_level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors.extend(
            [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()],
        )
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        A configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to every subsequent log event.

    Example:
        >>> bind_context(command="enable", option="CONFIG_NET")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific context variables from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all context variables from the logging context."""
    structlog.contextvars.clear_contextvars()
