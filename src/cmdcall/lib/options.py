"""Layered option sets with presence-sensitive keys."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, Final

from cmdcall.lib.faults import (
    Advisory,
    OptionConflictError,
    OptionValueWarning,
    UnknownOptionWarning,
)


class _Unset:
    """Marker for an option key that no layer mentioned."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()

ANY_EXIT: Final = "any"
DEFAULT_IRS: Final = "\n"
DEFAULT_ALLOW_EXIT: Final[frozenset[int]] = frozenset({0})

OPTION_DESCRIPTIONS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "allow_exit": "Allowed exit codes: an int, a collection of ints, or 'any'.",
        "irs": "Record separator for splitting output; None disables splitting.",
        "chomp": "Strip one trailing record separator from returned output.",
        "both": "Capture stdout and stderr together.",
        "stdin": "Redirection source for standard input.",
        "stdout": "Redirection target for standard output; return the exit code.",
        "stderr": "Redirection target for standard error.",
        "fail_on_stderr": "Raise if the command writes anything to stderr.",
        "show_cmd": "Print the command before running it (True, a stream or a callable).",
        "binmode_stdin": "Pass stdin bytes through unencoded, or name an encoding.",
        "binmode_stdout": "Return stdout as bytes, or name an encoding.",
        "binmode_stderr": "Return stderr as bytes, or name an encoding.",
        "append_stdout": "Append to a stdout file instead of truncating it.",
        "append_stderr": "Append to a stderr file instead of truncating it.",
        "return_if_system_error": "Report launch failures as warnings (default on).",
    }
)
RECOGNIZED_KEYS: Final = frozenset(OPTION_DESCRIPTIONS)


def _normalize_allow_exit(value: object) -> frozenset[int] | None:
    """Return allowed codes (None meaning any), raising ValueError when malformed."""

    if isinstance(value, str):
        if value.strip().lower() == ANY_EXIT:
            return None
        raise ValueError(f"expected an int, a collection of ints or '{ANY_EXIT}', got {value!r}")
    if isinstance(value, bool):
        raise ValueError(f"expected an int, got bool ({value!r})")
    if isinstance(value, int):
        return frozenset({value})
    if isinstance(value, Iterable):
        codes: set[int] = set()
        for item in value:
            if isinstance(item, bool) or not isinstance(item, int):
                raise ValueError(f"expected int exit codes, got {type(item).__name__} ({item!r})")
            codes.add(item)
        if not codes:
            raise ValueError("expected at least one exit code")
        return frozenset(codes)
    raise ValueError(f"expected an int, a collection of ints or '{ANY_EXIT}', got {value!r}")


def freeze_layer(layer: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return a read-only snapshot of one option layer."""

    return MappingProxyType(dict(layer))


def _irs_is_valid(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str | bytes) and len(value) > 0


class OptionSet(Mapping[str, Any]):
    """Immutable mapping of recognized option keys to values.

    ``get`` is tri-state for every key: ``UNSET`` when no layer mentioned the
    key, ``None`` when a layer set it to null, otherwise the value.
    """

    __slots__ = ("_values", "_advisories")

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        *,
        advisories: Iterable[Advisory] = (),
    ) -> None:
        self._values: Mapping[str, Any] = MappingProxyType(dict(values or {}))
        self._advisories = tuple(advisories)

    @classmethod
    def merge(cls, *layers: Mapping[str, Any] | None) -> OptionSet:
        """Merge layers left to right; later layers win per key.

        Never raises. Unknown keys and malformed values are collected as
        advisories on the result and left out of its values.
        """

        values: dict[str, Any] = {}
        advisories: list[Advisory] = []
        for layer in layers:
            if not layer:
                continue
            for key, value in layer.items():
                if key not in RECOGNIZED_KEYS:
                    advisories.append(
                        Advisory(UnknownOptionWarning, f"Unknown option '{key}' ignored.")
                    )
                    continue
                if value is UNSET:
                    continue
                values[key] = value

        if "allow_exit" in values:
            try:
                _normalize_allow_exit(values["allow_exit"])
            except ValueError as exc:
                advisories.append(
                    Advisory(OptionValueWarning, f"Invalid value for 'allow_exit': {exc}.")
                )
                del values["allow_exit"]

        if "irs" in values and not _irs_is_valid(values["irs"]):
            advisories.append(
                Advisory(
                    OptionValueWarning,
                    f"Invalid value for 'irs': expected a non-empty string or None, "
                    f"got {values['irs']!r}.",
                )
            )
            del values["irs"]

        return cls(values, advisories=advisories)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"OptionSet({dict(self._values)!r})"

    def get(self, key: str, default: Any = UNSET) -> Any:
        return self._values.get(key, default)

    def is_set(self, key: str) -> bool:
        return key in self._values

    def flag(self, key: str, default: bool = False) -> bool:
        return bool(self._values.get(key, default))

    @property
    def advisories(self) -> tuple[Advisory, ...]:
        return self._advisories

    @property
    def irs(self) -> str | bytes | None:
        """Effective record separator; None means no record splitting."""

        return self._values.get("irs", DEFAULT_IRS)

    @property
    def allowed_exit_codes(self) -> frozenset[int] | None:
        """Allowed exit codes, or None when any code is allowed."""

        if "allow_exit" not in self._values:
            return DEFAULT_ALLOW_EXIT
        return _normalize_allow_exit(self._values["allow_exit"])

    def allows_exit(self, exit_code: int) -> bool:
        allowed = self.allowed_exit_codes
        return allowed is None or exit_code in allowed

    def validate(self) -> OptionSet:
        """Raise OptionConflictError for contradictory combinations."""

        if self.flag("both"):
            for key in ("stdout", "stderr"):
                if self.is_set(key):
                    raise OptionConflictError("both", key)
        if self.flag("fail_on_stderr"):
            if self.is_set("stderr"):
                raise OptionConflictError("fail_on_stderr", "stderr")
            if self.flag("both"):
                raise OptionConflictError("fail_on_stderr", "both")
        return self
