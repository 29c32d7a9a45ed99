from __future__ import annotations

import signal

import pytest

from cmdcall.lib.exec.signals import (
    LAUNCH_FAILED_EXIT_CODE,
    map_process_exit_code,
    signal_name,
    signal_to_exit_code,
)
from cmdcall.lib.records import chomp, split_records


@pytest.mark.parametrize(
    ("data", "irs", "expected"),
    [
        pytest.param("a\nb\n", "\n", ["a\n", "b\n"], id="terminated"),
        pytest.param("a\nb", "\n", ["a\n", "b"], id="unterminated-tail"),
        pytest.param("a-b-c-", "-", ["a-", "b-", "c-"], id="custom-separator"),
        pytest.param("a::b", "::", ["a::", "b"], id="multi-char"),
        pytest.param("a\nb\n", None, ["a\nb\n"], id="slurp"),
        pytest.param("", "\n", [], id="empty"),
        pytest.param(b"x\0y\0", "\0", [b"x\0", b"y\0"], id="bytes-with-text-separator"),
    ],
)
def test_split_records(data: str | bytes, irs: str | None, expected: list[object]) -> None:
    assert split_records(data, irs) == expected


def test_chomp_strips_one_trailing_separator() -> None:
    assert chomp("line\n\n", "\n") == "line\n"
    assert chomp("line", "\n") == "line"
    assert chomp("a-b-", "-") == "a-b"
    assert chomp(b"data\n", "\n") == b"data"
    assert chomp("keep\n", None) == "keep\n"


def test_exit_code_mapping() -> None:
    assert map_process_exit_code(0) == (0, None)
    assert map_process_exit_code(3) == (3, None)
    assert map_process_exit_code(-int(signal.SIGTERM)) == (
        128 + int(signal.SIGTERM),
        signal.SIGTERM,
    )
    assert signal_to_exit_code(signal.SIGINT) == 128 + int(signal.SIGINT)
    assert LAUNCH_FAILED_EXIT_CODE == -1


def test_signal_name_handles_unknown_numbers() -> None:
    assert signal_name(int(signal.SIGTERM)) == "SIGTERM"
    assert signal_name(250) == "signal 250"
