"""Install commands into namespaces and run one-shot commands."""

from __future__ import annotations

import keyword
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any

import structlog

from cmdcall.lib.config.settings import CmdcallConfig
from cmdcall.lib.domain import Context
from cmdcall.lib.factory import Command, make_cmd

logger = structlog.get_logger(__name__)

CommandSpec = str | Sequence[object]


def make_alias(
    spec: Sequence[object],
    *,
    layers: Sequence[Mapping[str, Any]] = (),
    config: CmdcallConfig | None = None,
) -> tuple[str, Command]:
    """Build ``(name, command)`` from ``(name, *option_layers, command, *bound_args)``.

    A spec holding only a name runs the command of the same name.
    """

    if not spec:
        raise ValueError("Alias spec is empty.")
    name, *parts = spec
    if not isinstance(name, str):
        raise TypeError(f"Alias name must be a string, got {type(name).__name__} ({name!r}).")
    command = make_cmd(*layers, *(parts or [name]), config=config)
    return name, command


def _validate_name(name: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f"Cannot install command under {name!r}: not a valid identifier.")


def bind_command(namespace: object, name: str, command: Command) -> None:
    """Bind one command under ``name`` in a mapping or as an attribute."""

    _validate_name(name)
    if isinstance(namespace, MutableMapping):
        namespace[name] = command
    else:
        setattr(namespace, name, command)


def install(
    namespace: object,
    *specs: CommandSpec,
    layers: Sequence[Mapping[str, Any]] = (),
    config: CmdcallConfig | None = None,
) -> dict[str, Command]:
    """Install commands into ``namespace`` and return them by name.

    Each spec is either a bare command name or an alias sequence
    ``(name, *option_layers, command, *bound_args)``. ``namespace`` is a
    mutable mapping such as ``globals()`` or any object accepting attributes.
    """

    installed: dict[str, Command] = {}
    for spec in specs:
        if isinstance(spec, str):
            name, command = spec, make_cmd(*layers, spec, config=config)
        elif isinstance(spec, Sequence):
            name, command = make_alias(spec, layers=layers, config=config)
        else:
            raise TypeError(f"Unsupported command spec: {spec!r}")
        bind_command(namespace, name, command)
        installed[name] = command
        logger.debug("Installed command.", name=name, command=str(command.command))
    return installed


def invoke(context: Context, *parts: object, config: CmdcallConfig | None = None) -> Any:
    """Run ``(*option_layers, command, *args, *option_layers)`` once in ``context``."""

    return make_cmd(*parts, config=config).invoke(context)


def run(*parts: object, config: CmdcallConfig | None = None) -> Any:
    """Run a command once and return its output as a string."""

    return invoke(Context.SCALAR, *parts, config=config)
