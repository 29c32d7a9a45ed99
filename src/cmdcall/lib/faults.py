"""Errors and warnings raised while resolving and running commands.

Fatal conditions are ``CommandError`` subclasses and are always raised.
Advisory conditions are ``CommandWarning`` subclasses delivered through the
standard :mod:`warnings` machinery, so callers decide whether they are fatal
with the usual filters (``warnings.simplefilter("error", CommandWarning)``)
or with :func:`fatal_warnings`.
"""

from __future__ import annotations

import os
import warnings
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class CommandError(Exception):
    """Base class for fatal command errors."""


class OptionConflictError(CommandError, ValueError):
    """Raised when resolved options contradict each other."""

    def __init__(self, first: str, second: str) -> None:
        self.keys = (first, second)
        super().__init__(f"Options '{first}' and '{second}' are mutually exclusive.")


class OptionPlacementError(CommandError, ValueError):
    """Raised when an option mapping is not at the start or end of the arguments."""

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(
            f"Option mappings may only appear first or last in the argument list "
            f"(found one at position {position})."
        )


class EmptyCommandError(CommandError, ValueError):
    """Raised when no command name is left after resolution."""

    def __init__(self) -> None:
        super().__init__("Empty command.")


class ArgumentError(CommandError, TypeError):
    """Raised when an argument fails while being converted to a string."""

    def __init__(self, position: int, cause: BaseException) -> None:
        self.position = position
        super().__init__(
            f"Argument at position {position} could not be converted to a string: {cause}"
        )


class RedirectionError(CommandError, TypeError):
    """Raised when a redirection target has an unsupported type."""

    def __init__(self, stream: str, target: object) -> None:
        self.stream = stream
        self.target = target
        super().__init__(
            f"Unsupported {stream} target of type {type(target).__name__}: {target!r}"
        )


class StderrViolationError(CommandError):
    """Raised when ``fail_on_stderr`` is set and the command wrote to stderr."""

    def __init__(self, command: str, stderr: str | bytes) -> None:
        self.command = command
        self.stderr = stderr
        text = stderr.decode(errors="replace") if isinstance(stderr, bytes) else stderr
        super().__init__(f"Command '{command}' wrote to stderr: {text.rstrip()}")


class CommandWarning(UserWarning):
    """Base class for advisory command conditions."""


class UnknownOptionWarning(CommandWarning):
    """An option key that is not recognized."""


class OptionValueWarning(CommandWarning):
    """A recognized option with a malformed value."""


class ArgumentWarning(CommandWarning):
    """An argument with no usable textual representation."""


class LaunchFailedWarning(CommandWarning):
    """The command could not be started."""

    def __init__(self, message: str, *, command: str = "", error: OSError | None = None) -> None:
        super().__init__(message)
        self.command = command
        self.error = error


class ExitStatusWarning(CommandWarning):
    """The command exited with a code outside the allowed set."""

    def __init__(self, message: str, *, command: str = "", exit_code: int = 0) -> None:
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code


class SignalWarning(CommandWarning):
    """The command was terminated by a signal."""

    def __init__(self, message: str, *, command: str = "", signal_number: int = 0) -> None:
        super().__init__(message)
        self.command = command
        self.signal_number = signal_number


@dataclass(frozen=True, slots=True)
class Advisory:
    """One deferred advisory collected during option or argument resolution."""

    category: type[CommandWarning]
    message: str


# Actions that hide a warning once it has been shown from the same location.
_DEDUPLICATING_ACTIONS = frozenset({"default", "module", "once"})


@contextmanager
def _every_occurrence() -> Iterator[None]:
    """Show each command warning, keeping the caller's "error" and "ignore" filters."""

    with warnings.catch_warnings():
        current = list(warnings.filters)
        warnings.resetwarnings()
        for action, message, category, module, lineno in current:
            warnings.filterwarnings(
                "always" if action in _DEDUPLICATING_ACTIONS else action,
                message=message.pattern if message is not None else "",
                category=category,
                module=module.pattern if module is not None else "",
                lineno=lineno,
                append=True,
            )
        warnings.simplefilter("always", CommandWarning, append=True)
        yield


def warn(warning: CommandWarning | Advisory) -> None:
    """Deliver one advisory through the warnings system, attributed to the caller.

    Repeated failures from the same call site are reported every time.
    """

    with _every_occurrence():
        if isinstance(warning, Advisory):
            warnings.warn(warning.message, warning.category, skip_file_prefixes=(_PACKAGE_DIR,))
            return
        warnings.warn(warning, skip_file_prefixes=(_PACKAGE_DIR,))


@contextmanager
def fatal_warnings(category: type[CommandWarning] = CommandWarning) -> Iterator[None]:
    """Escalate command warnings of ``category`` to exceptions inside the block."""

    with warnings.catch_warnings():
        warnings.simplefilter("error", category)
        yield
