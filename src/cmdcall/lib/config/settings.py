"""Operational config loader."""

from __future__ import annotations

import codecs
import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any, cast

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "cmdcall.toml"
CONFIG_PATH_ENV = "CMDCALL_CONFIG"


def _empty_options() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class CmdcallConfig:
    """Resolved operational configuration threaded into commands."""

    encoding: str = "utf-8"
    decode_errors: str = "replace"
    fatal_warnings: bool = False
    options: Mapping[str, Any] = field(default_factory=_empty_options)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))


_DEFAULTS_KEY_MAP: dict[str, str] = {
    "encoding": "encoding",
    "decode_errors": "decode_errors",
    "errors": "decode_errors",
    "fatal_warnings": "fatal_warnings",
    "fatal": "fatal_warnings",
}

_ENV_OVERRIDE_MAP: dict[str, str] = {
    "CMDCALL_ENCODING": "encoding",
    "CMDCALL_DECODE_ERRORS": "decode_errors",
    "CMDCALL_FATAL_WARNINGS": "fatal_warnings",
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


def _expected_type_name(field_name: str) -> str:
    if field_name == "fatal_warnings":
        return "bool"
    return "str"


def _validate_codec_value(*, field_name: str, value: str, source: str) -> str:
    try:
        if field_name == "encoding":
            codecs.lookup(value)
        elif field_name == "decode_errors":
            codecs.lookup_error(value)
    except LookupError as error:
        raise ValueError(
            f"Invalid value for '{source}': unknown {field_name} {value!r}."
        ) from error
    return value


def _coerce_file_value(*, field_name: str, raw_value: object, source: str) -> object:
    if _expected_type_name(field_name) == "bool":
        if not isinstance(raw_value, bool):
            raise ValueError(
                f"Invalid value for '{source}': expected bool, got "
                f"{type(raw_value).__name__} ({raw_value!r})."
            )
        return raw_value

    if not isinstance(raw_value, str):
        raise ValueError(
            f"Invalid value for '{source}': expected str, got "
            f"{type(raw_value).__name__} ({raw_value!r})."
        )
    normalized = raw_value.strip()
    if not normalized:
        raise ValueError(f"Invalid value for '{source}': expected non-empty string.")
    return _validate_codec_value(field_name=field_name, value=normalized, source=source)


def _coerce_env_value(*, field_name: str, raw_value: str, env_name: str) -> object:
    normalized = raw_value.strip()
    if _expected_type_name(field_name) == "bool":
        lowered = normalized.lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ValueError(
            f"Invalid environment override '{env_name}': expected bool, got {raw_value!r}."
        )

    if not normalized:
        raise ValueError(
            f"Invalid environment override '{env_name}': expected non-empty string."
        )
    return _validate_codec_value(field_name=field_name, value=normalized, source=env_name)


def _coerce_options_table(*, raw_value: object, source: str) -> Mapping[str, Any]:
    if not isinstance(raw_value, dict):
        raise ValueError(f"Invalid value for '{source}': expected table.")
    # Option keys are checked when the layer is merged, like any other layer.
    return MappingProxyType(dict(cast("dict[str, Any]", raw_value)))


def _default_values() -> dict[str, object]:
    defaults = CmdcallConfig()
    return {item.name: getattr(defaults, item.name) for item in fields(CmdcallConfig)}


def _apply_toml_payload(
    *,
    values: dict[str, object],
    payload: dict[str, object],
    path: Path,
) -> None:
    for key, raw_value in payload.items():
        if key == "options":
            values["options"] = _coerce_options_table(raw_value=raw_value, source="options")
            continue

        if key == "defaults":
            if not isinstance(raw_value, dict):
                raise ValueError(f"Invalid value for '{key}' in '{path}': expected table.")
            for section_key, section_value in cast("dict[str, object]", raw_value).items():
                field_name = _DEFAULTS_KEY_MAP.get(section_key)
                if field_name is None:
                    logger.warning(
                        "Ignoring unknown cmdcall config key '%s.%s'.",
                        key,
                        section_key,
                    )
                    continue
                values[field_name] = _coerce_file_value(
                    field_name=field_name,
                    raw_value=section_value,
                    source=f"{key}.{section_key}",
                )
            continue

        logger.warning("Ignoring unknown cmdcall config key '%s'.", key)


def _apply_env_overrides(values: dict[str, object]) -> None:
    for env_name, field_name in _ENV_OVERRIDE_MAP.items():
        raw_value = os.getenv(env_name)
        if raw_value is None:
            continue
        values[field_name] = _coerce_env_value(
            field_name=field_name,
            raw_value=raw_value,
            env_name=env_name,
        )


def _build_config(values: dict[str, object]) -> CmdcallConfig:
    return CmdcallConfig(
        encoding=cast("str", values["encoding"]),
        decode_errors=cast("str", values["decode_errors"]),
        fatal_warnings=cast("bool", values["fatal_warnings"]),
        options=cast("Mapping[str, Any]", values["options"]),
    )


def resolve_config_path(path: Path | None = None) -> Path:
    """Return the explicit path, ``$CMDCALL_CONFIG``, or ``./cmdcall.toml``."""

    if path is not None:
        return path
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / CONFIG_FILENAME


def load_config(path: Path | None = None) -> CmdcallConfig:
    """Load the cmdcall TOML config and apply environment overrides."""

    values = _default_values()
    config_path = resolve_config_path(path)
    if config_path.is_file():
        payload_obj = tomllib.loads(config_path.read_text(encoding="utf-8"))
        payload = cast("dict[str, object]", payload_obj)
        _apply_toml_payload(values=values, payload=payload, path=config_path)
    elif path is not None:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    _apply_env_overrides(values)
    return _build_config(values)
