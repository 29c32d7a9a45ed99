"""Exit status mapping for finished child processes."""

from __future__ import annotations

import signal
from typing import Final

# Reported when the process never started.
LAUNCH_FAILED_EXIT_CODE: Final = -1
SIGNAL_EXIT_CODE_BASE: Final = 128


def signal_to_exit_code(received_signal: signal.Signals | int) -> int:
    """Map a terminating signal to the shell-style exit code (128 + signum)."""

    return SIGNAL_EXIT_CODE_BASE + int(received_signal)


def map_process_exit_code(raw_return_code: int) -> tuple[int, signal.Signals | None]:
    """Map a raw Popen return code to ``(exit_code, terminating_signal)``.

    Popen reports death by signal N as ``-N``.
    """

    if raw_return_code >= 0:
        return raw_return_code, None

    signum = -raw_return_code
    try:
        received_signal = signal.Signals(signum)
    except ValueError:
        return signal_to_exit_code(signum), None
    return signal_to_exit_code(received_signal), received_signal


def signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"
