"""Record splitting and chomping for captured output."""

from __future__ import annotations

from typing import Any, cast


def coerce_separator(separator: str | bytes, like: str | bytes) -> str | bytes:
    """Return ``separator`` as the same type as ``like``."""

    if isinstance(like, bytes) and isinstance(separator, str):
        return separator.encode()
    if isinstance(like, str) and isinstance(separator, bytes):
        return separator.decode()
    return separator


def split_records(data: str | bytes, irs: str | bytes | None) -> list[Any]:
    """Split ``data`` after each separator, keeping the separators.

    ``irs=None`` returns the whole input as a single record.
    """

    if not data:
        return []
    if irs is None:
        return [data]

    separator = cast("Any", coerce_separator(irs, data))
    parts = cast("list[Any]", data.split(separator))
    records = [part + separator for part in parts[:-1]]
    if parts[-1]:
        records.append(parts[-1])
    return records


def chomp(data: Any, irs: str | bytes | None) -> Any:
    """Remove one trailing separator, if present."""

    if irs is None or not data:
        return data
    separator = coerce_separator(irs, data)
    if data.endswith(separator):
        return data[: -len(separator)]
    return data
