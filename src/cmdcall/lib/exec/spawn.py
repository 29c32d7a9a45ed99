"""Blocking subprocess execution with stream capture."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

import structlog

from cmdcall.lib.domain import ExecutionOutcome
from cmdcall.lib.exec.redirect import PopenStream
from cmdcall.lib.exec.signals import LAUNCH_FAILED_EXIT_CODE, map_process_exit_code

logger = structlog.get_logger(__name__)


def _terminate_after_interrupt(process: subprocess.Popen[bytes]) -> None:
    if process.poll() is not None:
        return
    process.kill()
    process.wait()


def spawn_process(
    argv: Sequence[str],
    *,
    stdin: PopenStream = None,
    stdout: PopenStream = None,
    stderr: PopenStream = None,
    input_data: bytes | None = None,
    return_if_system_error: bool = True,
) -> ExecutionOutcome:
    """Run one process to completion and return its raw outcome.

    Captured streams are returned as bytes. When the process cannot be
    started the outcome has ``launched=False`` unless ``return_if_system_error``
    is off, in which case the ``OSError`` propagates.
    """

    if not argv:
        raise ValueError("Cannot spawn process: command is empty.")

    try:
        process = subprocess.Popen(
            list(argv),
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
        )
    except OSError as exc:
        if not return_if_system_error:
            raise
        logger.debug("Command failed to start.", argv=list(argv), error=str(exc))
        return ExecutionOutcome(
            launched=False,
            exit_code=LAUNCH_FAILED_EXIT_CODE,
            launch_error=exc,
        )

    logger.debug("Spawned command.", argv=list(argv), pid=process.pid)
    with process:
        try:
            stdout_bytes, stderr_bytes = process.communicate(input=input_data)
        except BaseException:
            # Interrupted while waiting; never leave the child running.
            _terminate_after_interrupt(process)
            raise

    raw_return_code = process.returncode
    exit_code, received_signal = map_process_exit_code(raw_return_code)
    logger.debug(
        "Command finished.",
        argv=list(argv),
        exit_code=exit_code,
        raw_return_code=raw_return_code,
        signal=received_signal.name if received_signal is not None else None,
    )
    return ExecutionOutcome(
        launched=True,
        exit_code=exit_code,
        returncode=raw_return_code,
        signal=received_signal,
        stdout=stdout_bytes,
        stderr=stderr_bytes,
    )
