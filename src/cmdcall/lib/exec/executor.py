"""Context-sensitive command execution.

The caller's result context decides what an invocation returns:

* DISCARDED: ``None``; streams are inherited unless redirected.
* SCALAR: stdout as one string, or stdout and stderr merged with ``both``.
* LIST: stdout split into records on ``irs``, or
  ``(stdout, stderr, exit_code)`` with ``both``.

A ``stdout`` target, whatever its value, makes every context return the
exit code instead.
"""

from __future__ import annotations

import subprocess
import sys
from contextlib import ExitStack, nullcontext
from dataclasses import replace
from typing import Any

import structlog

from cmdcall.lib.config.settings import CmdcallConfig
from cmdcall.lib.domain import Context, ExecutionOutcome, Invocation
from cmdcall.lib.exec.errors import report_advisories, report_outcome
from cmdcall.lib.exec.redirect import (
    OutputPlan,
    StreamCodec,
    prepare_input,
    prepare_output,
)
from cmdcall.lib.exec.spawn import spawn_process
from cmdcall.lib.faults import fatal_warnings
from cmdcall.lib.options import UNSET, OptionSet
from cmdcall.lib.records import chomp, split_records

logger = structlog.get_logger(__name__)

_DEFAULT_CONFIG = CmdcallConfig()


def stream_codec(options: OptionSet, stream: str, config: CmdcallConfig) -> StreamCodec:
    """Resolve ``binmode_<stream>``: an encoding name, truthy for bytes, else default."""

    mode = options.get(f"binmode_{stream}")
    if isinstance(mode, str) and mode:
        return StreamCodec(mode, config.decode_errors)
    if mode is not UNSET and mode:
        return StreamCodec(None, config.decode_errors)
    return StreamCodec(config.encoding, config.decode_errors)


def format_command_line(argv: tuple[str, ...]) -> str:
    return "$ " + " ".join(argv) + "\n"


def show_command(argv: tuple[str, ...], sink: object) -> None:
    """Write the resolved command line to the ``show_cmd`` sink."""

    if sink is UNSET or sink is None or sink is False:
        return
    line = format_command_line(argv)
    if hasattr(sink, "write"):
        sink.write(line)
        return
    if callable(sink):
        sink(line)
        return
    if sink:
        sys.stderr.write(line)
        sys.stderr.flush()


def _flush_standard_streams() -> None:
    # Inherited descriptors share the terminal with our own buffered output.
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, ValueError, OSError):
            continue


def _plan_stdout(
    invocation: Invocation,
    *,
    codec: StreamCodec,
    stack: ExitStack,
) -> OutputPlan:
    options = invocation.options
    if options.is_set("stdout"):
        return prepare_output(
            "stdout",
            options.get("stdout"),
            codec=codec,
            irs=options.irs,
            append=options.flag("append_stdout"),
            stack=stack,
        )
    if invocation.context == Context.DISCARDED:
        return OutputPlan(None)
    return OutputPlan(subprocess.PIPE)


def _plan_stderr(
    invocation: Invocation,
    *,
    codec: StreamCodec,
    stack: ExitStack,
) -> OutputPlan:
    options = invocation.options
    if options.is_set("stderr"):
        return prepare_output(
            "stderr",
            options.get("stderr"),
            codec=codec,
            irs=options.irs,
            append=options.flag("append_stderr"),
            stack=stack,
        )
    if options.flag("both"):
        if invocation.context == Context.LIST:
            return OutputPlan(subprocess.PIPE)
        return OutputPlan(subprocess.STDOUT)
    if options.flag("fail_on_stderr"):
        return OutputPlan(subprocess.PIPE)
    return OutputPlan(None)


def _decode(data: bytes | None, codec: StreamCodec) -> str | bytes | None:
    if data is None:
        return None
    return codec.decode(data)


def _empty_like(codec: StreamCodec) -> str | bytes:
    return b"" if codec.encoding is None else ""


def compute_result(
    invocation: Invocation,
    outcome: ExecutionOutcome,
    *,
    empty: str | bytes = "",
) -> Any:
    """Shape the return value for the invocation's context (see module docstring)."""

    options = invocation.options
    if options.is_set("stdout"):
        return outcome.exit_code
    if invocation.context == Context.DISCARDED:
        return None

    irs = options.irs
    chomped = options.flag("chomp")
    stdout = outcome.stdout if outcome.stdout is not None else empty

    if invocation.context == Context.SCALAR:
        return chomp(stdout, irs) if chomped else stdout

    if options.flag("both"):
        stderr = outcome.stderr if outcome.stderr is not None else empty
        if chomped:
            return (chomp(stdout, irs), chomp(stderr, irs), outcome.exit_code)
        return (stdout, stderr, outcome.exit_code)

    records = split_records(stdout, irs)
    if chomped:
        return [chomp(record, irs) for record in records]
    return records


def _execute(
    invocation: Invocation,
    resolved_config: CmdcallConfig,
) -> tuple[Any, ExecutionOutcome]:
    options = invocation.options
    report_advisories(invocation.advisories)

    stdin_codec = stream_codec(options, "stdin", resolved_config)
    stdout_codec = stream_codec(options, "stdout", resolved_config)
    stderr_codec = stream_codec(options, "stderr", resolved_config)

    with ExitStack() as stack:
        stdin_stream, input_data = prepare_input(
            options.get("stdin"),
            codec=stdin_codec,
            stack=stack,
        )
        stdout_plan = _plan_stdout(
            invocation,
            codec=stdout_codec,
            stack=stack,
        )
        stderr_plan = _plan_stderr(invocation, codec=stderr_codec, stack=stack)

        show_command(invocation.argv, options.get("show_cmd"))
        _flush_standard_streams()
        raw = spawn_process(
            invocation.argv,
            stdin=stdin_stream,
            stdout=stdout_plan.stream,
            stderr=stderr_plan.stream,
            input_data=input_data,
            return_if_system_error=options.flag("return_if_system_error", default=True),
        )

    if raw.launched:
        for plan, data in ((stdout_plan, raw.stdout), (stderr_plan, raw.stderr)):
            if plan.deliver is not None and isinstance(data, bytes):
                plan.deliver(data)

    outcome = replace(
        raw,
        stdout=_decode(raw.stdout if isinstance(raw.stdout, bytes) else None, stdout_codec),
        stderr=_decode(raw.stderr if isinstance(raw.stderr, bytes) else None, stderr_codec),
    )
    category = report_outcome(invocation, outcome)
    logger.debug(
        "Invocation classified.",
        command=invocation.command,
        context=str(invocation.context),
        category=str(category),
        exit_code=outcome.exit_code,
    )
    return compute_result(invocation, outcome, empty=_empty_like(stdout_codec)), outcome


def execute_with_outcome(
    invocation: Invocation,
    config: CmdcallConfig | None = None,
) -> tuple[Any, ExecutionOutcome]:
    """Run one invocation and return ``(result, outcome)``.

    Option advisories are reported before launch. Files opened for
    redirection are closed on every exit path. With
    ``config.fatal_warnings`` every command warning is raised instead.
    """

    resolved_config = config or _DEFAULT_CONFIG
    guard = fatal_warnings() if resolved_config.fatal_warnings else nullcontext()
    with guard:
        return _execute(invocation, resolved_config)


def execute(invocation: Invocation, config: CmdcallConfig | None = None) -> Any:
    """Run one invocation and return the value for its context."""

    result, _outcome = execute_with_outcome(invocation, config)
    return result
