"""Map redirection targets onto subprocess stream arguments.

A target is wired in two steps: ``prepare_*`` turns it into the value passed
to ``subprocess.Popen`` (opening files on the supplied ``ExitStack``), and for
in-memory targets a delivery callback copies captured output into the target
once the process has finished.
"""

from __future__ import annotations

import io
import os
import subprocess
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass
from enum import StrEnum
from typing import IO, Any, cast

from cmdcall.lib.faults import RedirectionError
from cmdcall.lib.options import UNSET
from cmdcall.lib.records import split_records

PopenStream = int | IO[Any] | None
Delivery = Callable[[bytes], None]


class TargetKind(StrEnum):
    INHERIT = "inherit"
    DISCARD = "discard"
    FILENAME = "filename"
    HANDLE = "handle"
    BUFFER = "buffer"
    BYTES = "bytes"
    RECORDS = "records"
    CALLBACK = "callback"


@dataclass(frozen=True, slots=True)
class StreamCodec:
    """How captured bytes for one stream become text (or stay bytes)."""

    encoding: str | None
    errors: str = "replace"

    def decode(self, data: bytes) -> str | bytes:
        if self.encoding is None:
            return data
        return data.decode(self.encoding, errors=self.errors)

    def encode(self, data: str | bytes) -> bytes:
        if isinstance(data, bytes):
            return data
        return data.encode(self.encoding or "utf-8", errors="strict")


@dataclass(frozen=True, slots=True)
class OutputPlan:
    """Popen argument for one output stream plus optional post-run delivery."""

    stream: PopenStream
    deliver: Delivery | None = None


def _has_fileno(target: object) -> bool:
    fileno = getattr(target, "fileno", None)
    if fileno is None:
        return False
    try:
        fileno()
    except (OSError, ValueError, io.UnsupportedOperation):
        return False
    return True


def classify_target(target: object) -> TargetKind:
    """Return the kind of redirection a target value requests."""

    if target is UNSET:
        return TargetKind.INHERIT
    if target is None:
        return TargetKind.DISCARD
    if isinstance(target, str | os.PathLike):
        return TargetKind.FILENAME
    if isinstance(target, bytes | bytearray):
        return TargetKind.BYTES
    if isinstance(target, list):
        return TargetKind.RECORDS
    if _has_fileno(target):
        return TargetKind.HANDLE
    if hasattr(target, "write") or hasattr(target, "read"):
        return TargetKind.BUFFER
    if callable(target):
        return TargetKind.CALLBACK
    raise RedirectionError("redirection", target)


def _is_binary_buffer(target: object) -> bool:
    return isinstance(target, io.BufferedIOBase | io.RawIOBase)


def _collect_callback_input(producer: Callable[[], object], codec: StreamCodec) -> bytes:
    chunks: list[bytes] = []
    while True:
        record = producer()
        if record is None:
            break
        chunks.append(codec.encode(cast("str | bytes", record)))
    return b"".join(chunks)


def prepare_input(
    target: object,
    *,
    codec: StreamCodec,
    stack: ExitStack,
) -> tuple[PopenStream, bytes | None]:
    """Return ``(popen_stdin, input_bytes)`` for a stdin target."""

    try:
        kind = classify_target(target)
    except RedirectionError:
        raise RedirectionError("stdin", target) from None

    if kind is TargetKind.INHERIT:
        return None, None
    if kind is TargetKind.DISCARD:
        return subprocess.DEVNULL, None
    if kind is TargetKind.FILENAME:
        path = os.fspath(cast("str | os.PathLike[str]", target))
        return stack.enter_context(open(path, "rb")), None
    if kind is TargetKind.HANDLE:
        return cast("IO[Any]", target), None
    if kind is TargetKind.BYTES:
        return subprocess.PIPE, bytes(cast("bytes | bytearray", target))
    if kind is TargetKind.BUFFER:
        content = cast("IO[Any]", target).read()
        return subprocess.PIPE, codec.encode(content)
    if kind is TargetKind.RECORDS:
        records = cast("list[str | bytes]", target)
        return subprocess.PIPE, b"".join(codec.encode(record) for record in records)
    return subprocess.PIPE, _collect_callback_input(cast("Callable[[], object]", target), codec)


def prepare_output(
    name: str,
    target: object,
    *,
    codec: StreamCodec,
    irs: str | bytes | None,
    append: bool,
    stack: ExitStack,
) -> OutputPlan:
    """Return the Popen argument and post-run delivery for a stdout/stderr target."""

    try:
        kind = classify_target(target)
    except RedirectionError:
        raise RedirectionError(name, target) from None

    if kind is TargetKind.INHERIT:
        return OutputPlan(None)
    if kind is TargetKind.DISCARD:
        return OutputPlan(subprocess.DEVNULL)
    if kind is TargetKind.FILENAME:
        path = os.fspath(cast("str | os.PathLike[str]", target))
        return OutputPlan(stack.enter_context(open(path, "ab" if append else "wb")))
    if kind is TargetKind.HANDLE:
        handle = cast("IO[Any]", target)
        handle.flush()
        return OutputPlan(handle)

    if kind is TargetKind.BYTES:
        if not isinstance(target, bytearray):
            raise RedirectionError(name, target)
        buffer = target

        def _deliver_bytes(data: bytes) -> None:
            buffer[:] = data

        return OutputPlan(subprocess.PIPE, _deliver_bytes)

    if kind is TargetKind.BUFFER:
        sink = cast("IO[Any]", target)
        text_codec = StreamCodec(codec.encoding or "utf-8", codec.errors)
        binary = _is_binary_buffer(sink)

        def _deliver_buffer(data: bytes) -> None:
            sink.write(data if binary else text_codec.decode(data))

        return OutputPlan(subprocess.PIPE, _deliver_buffer)

    if kind is TargetKind.RECORDS:
        records = cast("list[object]", target)

        def _deliver_records(data: bytes) -> None:
            records[:] = split_records(codec.decode(data), irs)

        return OutputPlan(subprocess.PIPE, _deliver_records)

    callback = cast("Callable[[object], object]", target)

    def _deliver_callback(data: bytes) -> None:
        for record in split_records(codec.decode(data), irs):
            callback(record)

    return OutputPlan(subprocess.PIPE, _deliver_callback)
