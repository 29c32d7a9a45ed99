"""Outcome classification and failure reporting."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING

from cmdcall.lib.exec.signals import signal_name
from cmdcall.lib.faults import (
    Advisory,
    ExitStatusWarning,
    LaunchFailedWarning,
    SignalWarning,
    StderrViolationError,
    warn,
)
from cmdcall.lib.records import chomp

if TYPE_CHECKING:
    from cmdcall.lib.domain import ExecutionOutcome, Invocation
    from cmdcall.lib.options import OptionSet


class OutcomeCategory(StrEnum):
    SUCCEEDED = "succeeded"
    LAUNCH_FAILED = "launch_failed"
    BAD_EXIT = "bad_exit"
    SIGNAL_TERMINATED = "signal_terminated"
    STDERR_VIOLATION = "stderr_violation"


def stderr_violates(stderr: str | bytes | None, irs: str | bytes | None) -> bool:
    """True when stderr holds anything beyond one trailing record separator."""

    if not stderr:
        return False
    return bool(chomp(stderr, irs if irs is not None else "\n"))


def classify_outcome(outcome: ExecutionOutcome, options: OptionSet) -> OutcomeCategory:
    """Classify one finished invocation into a single terminal category."""

    if not outcome.launched:
        return OutcomeCategory.LAUNCH_FAILED
    if options.flag("fail_on_stderr") and stderr_violates(outcome.stderr, options.irs):
        return OutcomeCategory.STDERR_VIOLATION
    if outcome.returncode is not None and outcome.returncode < 0:
        return OutcomeCategory.SIGNAL_TERMINATED
    if not options.allows_exit(outcome.exit_code):
        return OutcomeCategory.BAD_EXIT
    return OutcomeCategory.SUCCEEDED


def report_advisories(advisories: Iterable[Advisory]) -> None:
    for advisory in advisories:
        warn(advisory)


def report_outcome(invocation: Invocation, outcome: ExecutionOutcome) -> OutcomeCategory:
    """Warn about (or raise for) a failed invocation and return its category.

    Only a stderr violation raises directly; every other failure is a
    ``CommandWarning`` whose severity is left to the caller's warning filters.
    """

    category = classify_outcome(outcome, invocation.options)
    command = invocation.command

    if category == OutcomeCategory.LAUNCH_FAILED:
        error = outcome.launch_error
        reason = error.strerror if error is not None and error.strerror else str(error)
        warn(
            LaunchFailedWarning(
                f"Command '{command}' could not be started: {reason}",
                command=command,
                error=error,
            )
        )
    elif category == OutcomeCategory.STDERR_VIOLATION:
        raise StderrViolationError(command, outcome.stderr or "")
    elif category == OutcomeCategory.SIGNAL_TERMINATED:
        signal_number = -(outcome.returncode or 0)
        warn(
            SignalWarning(
                f"Command '{command}' was terminated by {signal_name(signal_number)}.",
                command=command,
                signal_number=signal_number,
            )
        )
    elif category == OutcomeCategory.BAD_EXIT:
        warn(
            ExitStatusWarning(
                f"Command '{command}' exited with status {outcome.exit_code}.",
                command=command,
                exit_code=outcome.exit_code,
            )
        )
    return category
