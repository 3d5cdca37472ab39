"""Key-argument overloads of `storage.sync.get`.

The target API accepts a single key, a list of keys, an object of defaults,
or `null` for everything. `parse_keys` turns the raw argument into one of the
variants below once; `get` then matches on the variant.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .result import UNDEFINED


@dataclass(slots=True, frozen=True)
class AllKeys:
    pass


@dataclass(slots=True, frozen=True)
class NoKeys:
    pass


@dataclass(slots=True, frozen=True)
class SingleKey:
    key: str


@dataclass(slots=True, frozen=True)
class KeyList:
    keys: tuple[str, ...]
    # Positions of elements that were not strings before conversion.
    invalid: tuple[int, ...] = ()


@dataclass(slots=True, frozen=True)
class DefaultsMap:
    defaults: dict[str, Any] = field(default_factory=dict)


KeySpec = AllKeys | NoKeys | SingleKey | KeyList | DefaultsMap


def js_string(value: Any) -> str:
    """Convert a value the way the target API turns a property name into a string."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None or v is UNDEFINED else js_string(v) for v in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def parse_keys(raw: Any) -> KeySpec:
    if raw is None:
        return AllKeys()
    if isinstance(raw, str):
        return SingleKey(raw) if raw else NoKeys()
    if raw is UNDEFINED or raw is False or (isinstance(raw, (int, float)) and not raw):
        return NoKeys()
    if isinstance(raw, (list, tuple)) and raw:
        invalid = tuple(i for i, item in enumerate(raw) if not isinstance(item, str))
        return KeyList(keys=tuple(js_string(item) for item in raw), invalid=invalid)
    if isinstance(raw, Mapping):
        return DefaultsMap(defaults={js_string(k): v for k, v in raw.items()})
    # Empty lists and truthy scalars behave like an object with no own properties.
    return DefaultsMap()


def own_properties(raw: Any) -> dict[str, Any] | None:
    """Return the own key/value pairs of a value, or None for `null`/`undefined`.

    Strings and lists expose their items under index keys; other scalars have
    no own properties.
    """
    if raw is None or raw is UNDEFINED:
        return None
    if isinstance(raw, Mapping):
        return {js_string(k): v for k, v in raw.items()}
    if isinstance(raw, (str, list, tuple)):
        return {str(i): v for i, v in enumerate(raw)}
    return {}


__all__ = [
    "AllKeys",
    "DefaultsMap",
    "KeyList",
    "KeySpec",
    "NoKeys",
    "SingleKey",
    "js_string",
    "own_properties",
    "parse_keys",
]
