from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from cmdcall.lib.faults import ExitStatusWarning
from cmdcall.lib.logging import configure_logging, log_command_warning


@pytest.fixture
def restore_logging() -> Iterator[None]:
    package_logger = logging.getLogger("cmdcall")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
    structlog.reset_defaults()


@pytest.mark.parametrize(
    ("verbosity", "level"),
    [
        pytest.param(0, logging.WARNING, id="quiet"),
        pytest.param(1, logging.INFO, id="verbose"),
        pytest.param(3, logging.DEBUG, id="debug"),
    ],
)
def test_configure_logging_sets_package_level(
    restore_logging: None,
    verbosity: int,
    level: int,
) -> None:
    configure_logging(verbosity=verbosity)

    package_logger = logging.getLogger("cmdcall")
    assert package_logger.level == level
    assert package_logger.propagate is False
    assert len(package_logger.handlers) == 1


def test_command_warnings_are_logged_with_category() -> None:
    warning = ExitStatusWarning("Command 'tool' exited with status 2.", command="tool", exit_code=2)

    with capture_logs() as logs:
        log_command_warning(warning, ExitStatusWarning, "caller.py", 7)

    assert logs == [
        {
            "event": "Command 'tool' exited with status 2.",
            "category": "ExitStatusWarning",
            "location": "caller.py:7",
            "log_level": "warning",
        }
    ]
