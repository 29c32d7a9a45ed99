"""Core frozen domain dataclasses."""

from __future__ import annotations

import signal
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdcall.lib.faults import Advisory
    from cmdcall.lib.options import OptionSet


class Context(StrEnum):
    """How the caller intends to use the result of one invocation."""

    DISCARDED = "discarded"
    SCALAR = "scalar"
    LIST = "list"


@dataclass(frozen=True, slots=True)
class Invocation:
    """One fully resolved call: command, string arguments, options, context."""

    command: str
    args: tuple[str, ...]
    options: OptionSet
    context: Context
    advisories: tuple[Advisory, ...] = ()

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.command, *self.args)


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Raw result of running one external process."""

    launched: bool
    exit_code: int
    returncode: int | None = None
    signal: signal.Signals | None = None
    stdout: str | bytes | None = None
    stderr: str | bytes | None = None
    launch_error: OSError | None = None
