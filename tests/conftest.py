"""Shared pytest fixtures for child-process and CLI checks."""

from __future__ import annotations

import os
import subprocess
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

PACKAGE_ROOT = Path(__file__).resolve().parents[1]

FOO_BAR_SOURCE = """
import sys

sys.stdout.write("Foo\\n")
sys.stdout.flush()
sys.stderr.write("Bar\\n")
sys.stderr.flush()
sys.exit(123)
"""

CAT_SOURCE = """
import sys

sys.stdout.write(sys.stdin.read())
"""


@dataclass(frozen=True, slots=True)
class CliResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


@pytest.fixture
def package_root() -> Path:
    return PACKAGE_ROOT


@pytest.fixture
def script(tmp_path: Path) -> Callable[..., list[str]]:
    """Write a Python child script and return the argv prefix that runs it."""

    def _write(source: str, name: str = "child.py") -> list[str]:
        path = tmp_path / name
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return [sys.executable, str(path)]

    return _write


@pytest.fixture
def foo_bar(script: Callable[..., list[str]]) -> list[str]:
    """Child writing 'Foo' to stdout and 'Bar' to stderr, then exiting 123."""

    return script(FOO_BAR_SOURCE, name="foo_bar.py")


@pytest.fixture
def cat(script: Callable[..., list[str]]) -> list[str]:
    return script(CAT_SOURCE, name="cat.py")


@pytest.fixture
def cli_env(package_root: Path) -> dict[str, str]:
    env = os.environ.copy()
    existing = env.get("PYTHONPATH", "")
    root = str(package_root / "src")
    env["PYTHONPATH"] = root if not existing else f"{root}{os.pathsep}{existing}"
    for name in (
        "CMDCALL_CONFIG",
        "CMDCALL_ENCODING",
        "CMDCALL_DECODE_ERRORS",
        "CMDCALL_FATAL_WARNINGS",
    ):
        env.pop(name, None)
    return env


@pytest.fixture
def run_cmdcall(tmp_path: Path, cli_env: dict[str, str]) -> Callable[..., CliResult]:
    def _run(args: list[str], timeout: float = 15.0) -> CliResult:
        completed = subprocess.run(
            [sys.executable, "-m", "cmdcall", *args],
            cwd=tmp_path,
            env=cli_env,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
        return CliResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

    return _run
