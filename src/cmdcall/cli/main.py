"""Cyclopts CLI entry point for cmdcall."""

from __future__ import annotations

import json
import re
import sys
import warnings
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

from cyclopts import App, Parameter

from cmdcall import __version__
from cmdcall.lib.config.settings import CmdcallConfig, load_config
from cmdcall.lib.domain import Context
from cmdcall.lib.factory import make_cmd
from cmdcall.lib.faults import CommandError, CommandWarning
from cmdcall.lib.logging import configure_logging, log_command_warning
from cmdcall.lib.options import OPTION_DESCRIPTIONS

if TYPE_CHECKING:
    from collections.abc import Sequence

app = App(
    name="cmdcall",
    help="Call external commands like functions.",
    version=__version__,
    help_formatter="plain",
)


_SEPARATOR_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "0": "\0", "\\": "\\"}
_SEPARATOR_ESCAPE_PATTERN = re.compile(r"\\(x[0-9a-fA-F]{2}|[nrt0\\])")


def unescape_separator(value: str) -> str:
    """Expand backslash escapes in a separator typed on the command line.

    Only ``\\n``, ``\\r``, ``\\t``, ``\\0``, ``\\\\`` and ``\\xHH`` are expanded;
    every other character, including non-ASCII text, is kept as given.
    """

    def _expand(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape.startswith("x"):
            return chr(int(escape[1:], 16))
        return _SEPARATOR_ESCAPES[escape]

    return _SEPARATOR_ESCAPE_PATTERN.sub(_expand, value)


def _parse_allow_exit(values: tuple[str, ...]) -> object:
    if not values:
        return None
    if len(values) == 1 and values[0].strip().lower() == "any":
        return "any"
    codes: list[int] = []
    for value in values:
        try:
            codes.append(int(value))
        except ValueError as error:
            raise ValueError(
                f"Invalid value for '--allow-exit': expected int or 'any', got {value!r}."
            ) from error
    return codes


def _cli_options(
    *,
    both: bool,
    chomp: bool,
    irs: str | None,
    allow_exit: tuple[str, ...],
    fail_on_stderr: bool,
    show_cmd: bool,
) -> dict[str, object]:
    options: dict[str, object] = {}
    if both:
        options["both"] = True
    if chomp:
        options["chomp"] = True
    if irs is not None:
        options["irs"] = unescape_separator(irs)
    parsed_allow_exit = _parse_allow_exit(allow_exit)
    if parsed_allow_exit is not None:
        options["allow_exit"] = parsed_allow_exit
    if fail_on_stderr:
        options["fail_on_stderr"] = True
    if show_cmd:
        options["show_cmd"] = True
    return options


def _emit_result(result: Any, *, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps(list(result) if isinstance(result, tuple) else result))
        return
    if result is None:
        return
    if isinstance(result, tuple):
        stdout, stderr, exit_code = result
        sys.stdout.write(stdout)
        sys.stderr.write(stderr)
        print(f"exit: {exit_code}", file=sys.stderr)
        return
    if isinstance(result, list):
        for record in result:
            print(record, end="" if str(record).endswith("\n") else "\n")
        return
    sys.stdout.write(str(result))


def _load_cli_config(config_path: str | None) -> CmdcallConfig:
    return load_config(Path(config_path).expanduser() if config_path is not None else None)


@app.command(name="run")
def run_command(
    command: str,
    *args: str,
    lines: Annotated[
        bool,
        Parameter(name="--lines", help="Return output as a list of records."),
    ] = False,
    both: Annotated[
        bool,
        Parameter(name="--both", help="Capture stdout and stderr together."),
    ] = False,
    chomp: Annotated[
        bool,
        Parameter(name="--chomp", help="Strip one trailing record separator."),
    ] = False,
    irs: Annotated[
        str | None,
        Parameter(name="--irs", help="Record separator (backslash escapes allowed)."),
    ] = None,
    allow_exit: Annotated[
        tuple[str, ...],
        Parameter(
            name="--allow-exit",
            help="Allowed exit code, repeatable, or 'any'.",
            negative_iterable=(),
        ),
    ] = (),
    fail_on_stderr: Annotated[
        bool,
        Parameter(name="--fail-on-stderr", help="Fail if the command writes to stderr."),
    ] = False,
    show_cmd: Annotated[
        bool,
        Parameter(name="--show-cmd", help="Print the command line before running it."),
    ] = False,
    fatal: Annotated[
        bool,
        Parameter(name="--fatal", help="Treat command warnings as errors."),
    ] = False,
    config_path: Annotated[
        str | None,
        Parameter(name="--config", help="Path to a cmdcall TOML config file."),
    ] = None,
    json_mode: Annotated[
        bool,
        Parameter(name="--json", help="Emit the result as JSON."),
    ] = False,
) -> None:
    """Run COMMAND once with ARGS. Put '--' before the command to pass flags to it."""

    config = _load_cli_config(config_path)
    options = _cli_options(
        both=both,
        chomp=chomp,
        irs=irs,
        allow_exit=allow_exit,
        fail_on_stderr=fail_on_stderr,
        show_cmd=show_cmd,
    )
    context = Context.LIST if lines else Context.SCALAR
    target = make_cmd(options, command, *args, config=config)

    with warnings.catch_warnings():
        warnings.simplefilter("always", CommandWarning)
        if fatal or config.fatal_warnings:
            warnings.simplefilter("error", CommandWarning)
        warnings.showwarning = log_command_warning
        result = target.invoke(context)
    _emit_result(result, json_mode=json_mode)


@app.command(name="options")
def options_command(
    json_mode: Annotated[
        bool,
        Parameter(name="--json", help="Emit option descriptions as JSON."),
    ] = False,
) -> None:
    """List recognized option keys."""

    if json_mode:
        print(json.dumps(dict(OPTION_DESCRIPTIONS), sort_keys=True))
        return
    width = max(len(key) for key in OPTION_DESCRIPTIONS)
    for key in sorted(OPTION_DESCRIPTIONS):
        print(f"{key.ljust(width)}  {OPTION_DESCRIPTIONS[key]}")


def _extract_verbosity(argv: Sequence[str]) -> tuple[list[str], int]:
    verbosity = 0
    cleaned: list[str] = []
    passthrough = False
    for arg in argv:
        if passthrough:
            cleaned.append(arg)
            continue
        if arg == "--":
            passthrough = True
            cleaned.append(arg)
            continue
        if arg in {"--verbose", "-v"}:
            verbosity += 1
            continue
        cleaned.append(arg)
    return cleaned, verbosity


def _operation_error_message(exc: BaseException) -> str:
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `cmdcall` and `python -m cmdcall`."""

    args, verbosity = _extract_verbosity(list(sys.argv[1:] if argv is None else argv))
    configure_logging(json_mode="--json" in args, verbosity=verbosity)

    try:
        app(args)
    except (CommandError, CommandWarning) as exc:
        print(f"error: {_operation_error_message(exc)}", file=sys.stderr)
        raise SystemExit(1) from None
    except (ValueError, FileNotFoundError, OSError) as exc:
        print(f"error: {_operation_error_message(exc)}", file=sys.stderr)
        raise SystemExit(1) from None
