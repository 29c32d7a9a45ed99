"""Execution engine primitives."""

from cmdcall.lib.exec.errors import OutcomeCategory, classify_outcome, report_outcome
from cmdcall.lib.exec.executor import compute_result, execute, execute_with_outcome
from cmdcall.lib.exec.signals import (
    LAUNCH_FAILED_EXIT_CODE,
    map_process_exit_code,
    signal_to_exit_code,
)
from cmdcall.lib.exec.spawn import spawn_process

__all__ = [
    "LAUNCH_FAILED_EXIT_CODE",
    "OutcomeCategory",
    "classify_outcome",
    "compute_result",
    "execute",
    "execute_with_outcome",
    "map_process_exit_code",
    "report_outcome",
    "signal_to_exit_code",
    "spawn_process",
]
