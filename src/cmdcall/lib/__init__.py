"""Core cmdcall library exports."""

from cmdcall.lib.domain import Context, ExecutionOutcome, Invocation
from cmdcall.lib.options import UNSET, OptionSet

__all__ = ["UNSET", "Context", "ExecutionOutcome", "Invocation", "OptionSet"]
