"""Reusable bound commands."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from cmdcall.lib.builder import build_invocation, resolve_parts, split_fragments
from cmdcall.lib.config.settings import CmdcallConfig
from cmdcall.lib.domain import Context, ExecutionOutcome, Invocation
from cmdcall.lib.exec.executor import execute, execute_with_outcome
from cmdcall.lib.faults import EmptyCommandError
from cmdcall.lib.options import freeze_layer

_DEFAULT_CONFIG = CmdcallConfig()


@dataclass(frozen=True, slots=True)
class Command:
    """One external command with bound arguments and default option layers.

    Calling the command returns its output as a string; ``lines`` returns a
    list of records and ``system`` runs it with inherited streams. Option
    mappings may be passed first and/or last in any call.
    """

    command: object
    args: tuple[object, ...] = ()
    layers: tuple[Mapping[str, Any], ...] = ()
    config: CmdcallConfig = _DEFAULT_CONFIG

    def __post_init__(self) -> None:
        # Later edits to the caller's dicts must not reach a built command.
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "layers", tuple(freeze_layer(layer) for layer in self.layers))

    def resolve(self, context: Context, *extra: object) -> Invocation:
        leading, middle, trailing = split_fragments(extra)
        return build_invocation(
            self.command,
            (*self.args, *middle),
            layers=(self.config.options, *self.layers, *leading, *trailing),
            context=context,
        )

    def invoke(self, context: Context, *extra: object) -> Any:
        return execute(self.resolve(context, *extra), self.config)

    def invoke_with_outcome(
        self,
        context: Context,
        *extra: object,
    ) -> tuple[Any, ExecutionOutcome]:
        return execute_with_outcome(self.resolve(context, *extra), self.config)

    def __call__(self, *extra: object) -> Any:
        return self.invoke(Context.SCALAR, *extra)

    def lines(self, *extra: object) -> Any:
        return self.invoke(Context.LIST, *extra)

    def system(self, *extra: object) -> Any:
        return self.invoke(Context.DISCARDED, *extra)


def make_cmd(*parts: object, config: CmdcallConfig | None = None) -> Command:
    """Build a Command from ``(*option_layers, command, *bound_args)``.

    Option mappings may also trail the bound arguments. Nothing is
    registered anywhere.
    """

    layers, command, args = resolve_parts(parts)
    if command is None or command == "":
        raise EmptyCommandError()
    return Command(
        command=command,
        args=args,
        layers=layers,
        config=config or _DEFAULT_CONFIG,
    )
