"""Callable factory, namespace installation and the Shell handle."""

from __future__ import annotations

import dataclasses
import sys
from types import MappingProxyType, SimpleNamespace

import pytest

from cmdcall import CmdcallConfig, Command, Shell, install, invoke, make_cmd, run
from cmdcall.lib.domain import Context
from cmdcall.lib.faults import EmptyCommandError, OptionPlacementError
from cmdcall.lib.registry import make_alias

PY = sys.executable


def test_command_is_reusable_and_immutable() -> None:
    command = make_cmd(PY, "-c", "print('hi')")

    assert command() == "hi\n"
    assert command() == "hi\n"
    with pytest.raises(dataclasses.FrozenInstanceError):
        command.command = "other"  # type: ignore[misc]


def test_bound_layers_apply_before_call_layers() -> None:
    command = make_cmd({"chomp": True}, PY, "-c", "print('hi')")

    assert command() == "hi"
    assert command({"chomp": False}) == "hi\n"
    assert command.layers == ({"chomp": True},)


def test_call_arguments_follow_bound_arguments() -> None:
    command = make_cmd(PY, "-c", "import sys; print(sys.argv[1:])")

    assert command("a", "b", {"chomp": True}) == "['a', 'b']"


def test_make_cmd_accepts_trailing_option_layers() -> None:
    command = make_cmd(PY, "-c", "print('t')", {"chomp": True})

    assert command.args == ("-c", "print('t')")
    assert command() == "t"


@pytest.mark.parametrize(
    "parts",
    [
        pytest.param((), id="nothing"),
        pytest.param(("",), id="empty-name"),
        pytest.param((None,), id="none-name"),
        pytest.param(({"chomp": True},), id="only-options"),
    ],
)
def test_make_cmd_rejects_missing_command(parts: tuple[object, ...]) -> None:
    with pytest.raises(EmptyCommandError):
        make_cmd(*parts)


def test_make_cmd_rejects_options_between_arguments() -> None:
    with pytest.raises(OptionPlacementError):
        make_cmd(PY, {"chomp": True}, "-c", "pass")


def test_config_options_are_the_lowest_layer() -> None:
    config = CmdcallConfig(options=MappingProxyType({"chomp": True}))
    command = make_cmd(PY, "-c", "print('c')", config=config)

    assert command() == "c"
    assert command({"chomp": False}) == "c\n"


def test_later_edits_to_option_dicts_do_not_reach_built_commands() -> None:
    layer = {"chomp": False}
    command = make_cmd(layer, PY, "-c", "print('x')")
    layer["chomp"] = True

    assert command() == "x\n"
    assert command.layers == ({"chomp": False},)


def test_later_edits_to_config_options_are_ignored() -> None:
    options = {"chomp": True}
    config = CmdcallConfig(options=options)
    options["chomp"] = False

    assert config.options == {"chomp": True}
    assert make_cmd(PY, "-c", "print('c')", config=config)() == "c"


def test_later_edits_to_shell_layers_are_ignored() -> None:
    layer = {"chomp": True}
    sh = Shell(layer)
    layer["chomp"] = False

    assert sh.run(PY, "-c", "print('s')") == "s"


def test_install_bare_names_into_a_mapping() -> None:
    namespace: dict[str, object] = {}

    installed = install(namespace, "git", "ls")

    assert set(installed) == {"git", "ls"}
    assert namespace["git"] is installed["git"]
    assert isinstance(namespace["ls"], Command)
    assert installed["git"].command == "git"


def test_install_aliases_with_options_and_bound_arguments() -> None:
    namespace: dict[str, object] = {}

    install(namespace, ("py_echo", {"chomp": True}, PY, "-c", "import sys; print(sys.argv[1])"))

    assert namespace["py_echo"]("hello") == "hello"


def test_install_into_an_object() -> None:
    target = SimpleNamespace()

    install(target, ("py", PY), layers=({"chomp": True},))

    assert target.py("-c", "print(7)") == "7"


@pytest.mark.parametrize(
    "spec",
    [
        pytest.param("not valid", id="space"),
        pytest.param("class", id="keyword"),
        pytest.param(("9lives", PY), id="leading-digit"),
    ],
)
def test_install_rejects_names_that_are_not_identifiers(spec: object) -> None:
    with pytest.raises(ValueError):
        install({}, spec)


def test_make_alias_defaults_command_to_name() -> None:
    name, command = make_alias(("ls",))

    assert name == "ls"
    assert command.command == "ls"
    assert command.args == ()


def test_make_alias_requires_a_string_name() -> None:
    with pytest.raises(TypeError):
        make_alias((1, PY))
    with pytest.raises(ValueError):
        make_alias(())


def test_run_and_invoke_are_one_shot() -> None:
    assert run(PY, "-c", "print('r')") == "r\n"
    assert run({"chomp": True}, PY, "-c", "print('r')") == "r"
    assert invoke(Context.LIST, PY, "-c", "print(1); print(2)") == ["1\n", "2\n"]
    assert invoke(Context.DISCARDED, PY, "-c", "pass") is None


def test_shell_attributes_become_commands() -> None:
    sh = Shell({"chomp": True})

    git = sh.git
    assert isinstance(git, Command)
    assert git.command == "git"
    assert git.layers == ({"chomp": True},)
    assert sh.options.flag("chomp") is True


def test_shell_runs_commands_with_its_layers() -> None:
    sh = Shell({"chomp": True})

    assert sh.make_cmd(PY, "-c", "print('s')")() == "s"
    assert sh.run(PY, "-c", "print('s')", {"chomp": False}) == "s\n"
    assert sh.invoke(Context.LIST, PY, "-c", "print('a'); print('b')") == ["a", "b"]


def test_shell_install_binds_commands() -> None:
    namespace: dict[str, object] = {}

    Shell({"chomp": True}).install(namespace, ("py", PY))

    assert namespace["py"]("-c", "print('i')") == "i"


def test_shell_reserves_private_names() -> None:
    sh = Shell()

    with pytest.raises(AttributeError):
        _ = sh._hidden
    assert not hasattr(sh, "__wrapped__")


def test_shell_rejects_non_mapping_layers() -> None:
    with pytest.raises(TypeError):
        Shell("chomp")  # type: ignore[arg-type]
