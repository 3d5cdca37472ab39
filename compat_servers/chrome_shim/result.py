"""Operation results and the `undefined` marker.

Adapter operations never raise across their public boundary. Each returns an
`OpResult` carrying either the value or the captured exception; `legacy()`
gives the old-style view where failure is the `-1` sentinel.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

ERROR_SENTINEL = -1


class _Undefined:
    """Singleton standing for the target API's `undefined`."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "undefined"

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Undefined:
        return self


UNDEFINED = _Undefined()


@dataclass(slots=True, frozen=True)
class OpResult:
    ok: bool
    value: Any = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: Any) -> OpResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException) -> OpResult:
        return cls(ok=False, error=error)

    @property
    def error_message(self) -> str | None:
        if self.ok:
            return None
        return error_message(self.error)

    def legacy(self) -> Any:
        return self.value if self.ok else ERROR_SENTINEL


def error_message(error: BaseException | None) -> str:
    if error is None:
        return "Unknown error"
    # KeyError wraps its message in quotes.
    if isinstance(error, KeyError) and len(error.args) == 1:
        return str(error.args[0])
    return str(error) or type(error).__name__


def strip_undefined(value: Any) -> Any:
    """Apply JSON text conversion rules for `undefined` recursively.

    Mapping entries holding `UNDEFINED` are dropped; list items become `None`.
    """
    if value is UNDEFINED:
        return None
    if isinstance(value, dict):
        return {str(k): strip_undefined(v) for k, v in value.items() if v is not UNDEFINED}
    if isinstance(value, (list, tuple)):
        return [strip_undefined(v) for v in value]
    return value


def to_json_text(value: Any) -> str:
    return json.dumps(strip_undefined(value), ensure_ascii=False, separators=(",", ":"), default=str)
