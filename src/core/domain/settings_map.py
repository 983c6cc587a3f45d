"""Normalization of free-form settings maps.

Connections and webhooks carry a settings bag. Configuration supplies it as
strings; the remote API returns loosely typed JSON values. Locally the bag
is always a `dict[str, str]`.

Each raw value is first classified into a `SettingValue` (a small tagged
union) and then rendered by the formatter registered for its tag:

- strings pass through unchanged
- booleans render as `true` / `false`
- integers render as base-10 digits
- floats render with six decimals (`3.14 -> "3.140000"`)
- anything else (lists, nested objects, null) uses `str()`

`normalize` never raises: a value its formatter cannot render (an integer
beyond the interpreter's decimal conversion limit, an object whose `__str__`
fails) falls back to a hexadecimal or `<type>` placeholder.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class SettingKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    OTHER = "other"


@dataclass(frozen=True)
class SettingValue:
    """A raw settings value tagged with its scalar kind."""

    kind: SettingKind
    raw: Any


def classify(raw: Any) -> SettingValue:
    # bool is a subclass of int, so it has to be checked first.
    if isinstance(raw, str):
        return SettingValue(SettingKind.STRING, raw)
    if isinstance(raw, bool):
        return SettingValue(SettingKind.BOOLEAN, raw)
    if isinstance(raw, int):
        return SettingValue(SettingKind.INTEGER, raw)
    if isinstance(raw, float):
        return SettingValue(SettingKind.FLOAT, raw)
    return SettingValue(SettingKind.OTHER, raw)


_FORMATTERS: dict[SettingKind, Callable[[Any], str]] = {
    SettingKind.STRING: lambda raw: raw,
    SettingKind.BOOLEAN: lambda raw: "true" if raw else "false",
    SettingKind.INTEGER: lambda raw: str(int(raw)),
    SettingKind.FLOAT: lambda raw: f"{raw:.6f}",
    SettingKind.OTHER: str,
}


def _fallback(value: SettingValue) -> str:
    # Hex conversion of an int has no digit limit.
    if value.kind is SettingKind.INTEGER:
        return f"{value.raw:#x}"
    return f"<{type(value.raw).__name__}>"


def format_setting(value: SettingValue) -> str:
    try:
        return _FORMATTERS[value.kind](value.raw)
    except Exception:
        return _fallback(value)


def normalize(raw_map: Mapping[Any, Any] | None) -> dict[str, str]:
    """Convert a heterogeneous settings map into a string-keyed, string-valued map."""

    if not raw_map:
        return {}
    return {str(key): format_setting(classify(raw)) for key, raw in raw_map.items()}
