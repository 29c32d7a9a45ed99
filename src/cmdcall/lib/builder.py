"""Turn raw call arguments into one resolved invocation."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import Any

from cmdcall.lib.domain import Context, Invocation
from cmdcall.lib.faults import (
    Advisory,
    ArgumentError,
    ArgumentWarning,
    EmptyCommandError,
    OptionPlacementError,
)
from cmdcall.lib.options import OptionSet

OptionLayer = Mapping[str, Any]

_CONTAINER_TYPES = (list, tuple, set, frozenset)


def split_fragments(
    items: Sequence[object],
) -> tuple[tuple[OptionLayer, ...], tuple[object, ...], tuple[OptionLayer, ...]]:
    """Split leading and trailing option mappings off a flat argument list.

    Returns ``(leading, middle, trailing)``. A mapping anywhere inside
    ``middle`` raises OptionPlacementError.
    """

    start = 0
    while start < len(items) and isinstance(items[start], Mapping):
        start += 1
    end = len(items)
    while end > start and isinstance(items[end - 1], Mapping):
        end -= 1

    for position in range(start, end):
        if isinstance(items[position], Mapping):
            raise OptionPlacementError(position)

    leading = tuple(item for item in items[:start] if isinstance(item, Mapping))
    trailing = tuple(item for item in items[end:] if isinstance(item, Mapping))
    return leading, tuple(items[start:end]), trailing


def stringify_argument(value: object, position: int) -> tuple[str, Advisory | None]:
    """Convert one argument to text, with an advisory when it has no real text form."""

    if isinstance(value, str):
        return value, None
    if value is None:
        return "", Advisory(
            ArgumentWarning,
            f"Argument at position {position} is None; passing an empty string.",
        )
    if isinstance(value, bytes):
        return os.fsdecode(value), None
    if isinstance(value, os.PathLike):
        return os.fsdecode(os.fspath(value)), None

    try:
        text = str(value)
    except Exception as exc:
        raise ArgumentError(position, exc) from exc

    value_type = type(value)
    if isinstance(value, _CONTAINER_TYPES) or (
        value_type.__str__ is object.__str__ and value_type.__repr__ is object.__repr__
    ):
        return text, Advisory(
            ArgumentWarning,
            f"Argument at position {position} ({value_type.__name__}) has no string form; "
            f"passing {text!r}.",
        )
    return text, None


def build_invocation(
    command: object,
    raw_args: Sequence[object] = (),
    *,
    layers: Sequence[OptionLayer | None] = (),
    context: Context = Context.SCALAR,
) -> Invocation:
    """Resolve command, arguments and options for one call.

    ``layers`` are the default option layers; option mappings at either end of
    ``raw_args`` are merged after them. Raises EmptyCommandError,
    OptionPlacementError, ArgumentError or OptionConflictError.
    """

    leading, middle, trailing = split_fragments(raw_args)
    options = OptionSet.merge(*layers, *leading, *trailing)

    if command is None:
        raise EmptyCommandError()
    command_text, command_advisory = stringify_argument(command, 0)
    if not command_text:
        raise EmptyCommandError()

    advisories: list[Advisory] = list(options.advisories)
    if command_advisory is not None:
        advisories.append(command_advisory)

    args: list[str] = []
    for offset, value in enumerate(middle, start=1):
        text, advisory = stringify_argument(value, offset)
        if advisory is not None:
            advisories.append(advisory)
        args.append(text)

    options.validate()
    return Invocation(
        command=command_text,
        args=tuple(args),
        options=options,
        context=context,
        advisories=tuple(advisories),
    )


def resolve_parts(
    parts: Sequence[object],
) -> tuple[tuple[OptionLayer, ...], object, tuple[object, ...]]:
    """Split ``(*layers, command, *args, *layers)`` into layers, command and args."""

    leading, middle, trailing = split_fragments(parts)
    if not middle:
        raise EmptyCommandError()
    return (*leading, *trailing), middle[0], middle[1:]
