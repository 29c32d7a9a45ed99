"""Structlog setup for the cmdcall CLI."""

from __future__ import annotations

import logging as std_logging
import sys
from typing import TextIO

import structlog

_warning_logger = structlog.get_logger("cmdcall.warnings")


def _level_from_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return std_logging.WARNING
    if verbosity == 1:
        return std_logging.INFO
    return std_logging.DEBUG


def _renderer(json_mode: bool) -> structlog.typing.Processor:
    if json_mode:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(json_mode: bool = False, verbosity: int = 0) -> None:
    """Configure structlog and the ``cmdcall`` stdlib logger for CLI use.

    Library callers that never call this get structlog's defaults; the
    execution engine only logs at debug level.
    """

    level = _level_from_verbosity(verbosity)
    # Command output owns stdout; diagnostics always go to stderr.
    handler = std_logging.StreamHandler(sys.stderr)
    handler.setFormatter(std_logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    package_logger = std_logging.getLogger("cmdcall")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _renderer(json_mode),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def log_command_warning(
    message: Warning | str,
    category: type[Warning],
    filename: str,
    lineno: int,
    file: TextIO | None = None,
    line: str | None = None,
) -> None:
    """``warnings.showwarning`` replacement that logs instead of printing."""

    del file, line
    _warning_logger.warning(
        str(message),
        category=category.__name__,
        location=f"{filename}:{lineno}",
    )
