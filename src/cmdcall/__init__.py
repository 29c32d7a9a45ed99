"""Call external commands like functions."""

from cmdcall.lib.config.settings import CmdcallConfig, load_config
from cmdcall.lib.domain import Context, ExecutionOutcome, Invocation
from cmdcall.lib.factory import Command, make_cmd
from cmdcall.lib.faults import (
    ArgumentError,
    ArgumentWarning,
    CommandError,
    CommandWarning,
    EmptyCommandError,
    ExitStatusWarning,
    LaunchFailedWarning,
    OptionConflictError,
    OptionPlacementError,
    OptionValueWarning,
    RedirectionError,
    SignalWarning,
    StderrViolationError,
    UnknownOptionWarning,
    fatal_warnings,
)
from cmdcall.lib.options import UNSET, OptionSet
from cmdcall.lib.registry import install, invoke, run
from cmdcall.lib.shell import Shell

__version__ = "0.1.0"

__all__ = [
    "UNSET",
    "ArgumentError",
    "ArgumentWarning",
    "CmdcallConfig",
    "Command",
    "CommandError",
    "CommandWarning",
    "Context",
    "EmptyCommandError",
    "ExecutionOutcome",
    "ExitStatusWarning",
    "Invocation",
    "LaunchFailedWarning",
    "OptionConflictError",
    "OptionPlacementError",
    "OptionSet",
    "OptionValueWarning",
    "RedirectionError",
    "Shell",
    "SignalWarning",
    "StderrViolationError",
    "UnknownOptionWarning",
    "__version__",
    "fatal_warnings",
    "install",
    "invoke",
    "load_config",
    "make_cmd",
    "run",
]
