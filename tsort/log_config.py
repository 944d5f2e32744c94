"""Centralized structured logging configuration using structlog.

Log output goes to stderr: stdout is reserved for the sorted node names so
that tsort can sit in the middle of a shell pipeline.

Example:
    >>> from tsort.log_config import configure_logging, get_logger
    >>> configure_logging(level="INFO")
    >>> logger = get_logger(__name__)
    >>> logger.info("graph_sorted", node_count=4)
"""

import logging
import sys
from typing import Any

import structlog


def _diagnostic_processors(json_logs: bool) -> list[Any]:
    """Build the processor chain for entries written next to sort output.

    Entries carry the call site so a loop or read failure can be traced to
    the stage that reported it. The console renderer is colorless because
    stderr of a pipeline stage is usually a file or another program.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        )

    return processors


def configure_logging(level: str = "WARNING", json_logs: bool = False) -> None:
    """Route structlog through the standard library to stderr.

    The default level is WARNING so a successful sort prints nothing but node
    names. The function may be called again (the CLI does so once the
    configuration file is loaded); each call replaces the level and renderer.

    Args:
        level: Logging level name, case-insensitive
        json_logs: Render entries as JSON lines instead of key=value text

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        msg = f"Invalid log level: {level}"
        raise ValueError(msg)

    # stdout carries the sorted names.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)
    # basicConfig is a no-op once the root logger has handlers.
    logging.getLogger().setLevel(numeric_level)

    structlog.configure(
        processors=_diagnostic_processors(json_logs),
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
    """Bind context variables to every subsequent log entry.

    Example:
        >>> bind_context(input="deps.txt")
        >>> logger.info("graph_sorted")  # Will include input
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific context variables from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all context variables from the logging context."""
    structlog.contextvars.clear_contextvars()
