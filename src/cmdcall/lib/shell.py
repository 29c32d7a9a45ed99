"""Object handle whose attributes are commands."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cmdcall.lib.config.settings import CmdcallConfig
from cmdcall.lib.domain import Context
from cmdcall.lib.factory import Command, make_cmd
from cmdcall.lib.options import OptionSet, freeze_layer
from cmdcall.lib.registry import CommandSpec, install

_DEFAULT_CONFIG = CmdcallConfig()


class Shell:
    """Handle that turns any public attribute name into a Command.

    ``Shell({"chomp": True}).git("status")`` runs ``git status`` with the
    handle's option layers applied first. Names starting with an underscore
    and the methods defined here are reserved; use ``make_cmd`` to reach a
    command whose name collides with one of them.
    """

    __slots__ = ("_layers", "_config")

    def __init__(self, *layers: Mapping[str, Any], config: CmdcallConfig | None = None) -> None:
        for layer in layers:
            if not isinstance(layer, Mapping):
                raise TypeError(
                    f"Shell option layers must be mappings, got {type(layer).__name__}."
                )
        self._layers: tuple[Mapping[str, Any], ...] = tuple(
            freeze_layer(layer) for layer in layers
        )
        self._config = config or _DEFAULT_CONFIG

    @property
    def config(self) -> CmdcallConfig:
        return self._config

    @property
    def options(self) -> OptionSet:
        """The handle's default layers merged, config layer first."""

        return OptionSet.merge(self._config.options, *self._layers)

    def make_cmd(self, *parts: object) -> Command:
        return make_cmd(*self._layers, *parts, config=self._config)

    def invoke(self, context: Context, *parts: object) -> Any:
        return self.make_cmd(*parts).invoke(context)

    def run(self, *parts: object) -> Any:
        return self.invoke(Context.SCALAR, *parts)

    def install(self, namespace: object, *specs: CommandSpec) -> dict[str, Command]:
        return install(namespace, *specs, layers=self._layers, config=self._config)

    def __getattr__(self, name: str) -> Command:
        if name.startswith("_"):
            raise AttributeError(name)
        return Command(command=name, layers=self._layers, config=self._config)

    def __repr__(self) -> str:
        return f"Shell({', '.join(repr(dict(layer)) for layer in self._layers)})"
