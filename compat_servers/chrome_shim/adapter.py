"""Translates `chrome.*` calls onto host primitives.

Layout mirrors the target API: `adapter.storage.sync.get(...)`,
`adapter.tabs.query(...)`, `adapter.runtime.last_error`.

Every operation returns an `OpResult`. On failure the exception is also stored
in `runtime.last_error`, which lives for one dispatch: the dispatcher clears it
after responding.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

from .diagnostics import DiagnosticLog
from .result import UNDEFINED, OpResult
from .storage_keys import AllKeys, DefaultsMap, KeyList, NoKeys, SingleKey, own_properties, parse_keys
from .windows import (
    WindowRegistry,
    active_tabs,
    all_tabs,
    make_tab_records,
    resolve_current_window,
)

_LOGGER = logging.getLogger("chrome_shim.adapter")

_MSG_ARRAY_ITEM = "An item of the `keys` array wasn't a String"
_MSG_NO_OWN_PROPERTY = "The `keys` object does not contain any property on its own"
_MSG_SET_NOT_OBJECT = "The `keys` argument is not a valid Object with keys/properties"
_MSG_NO_QUERY = "No valid query is specified"
_MSG_NULL_TO_OBJECT = "Cannot convert undefined or null to object"


class Runtime:
    def __init__(self, adapter: ChromeAdapter) -> None:
        self._adapter = adapter
        self.last_error: BaseException | None = None

    def send_message(self, message: Any = UNDEFINED) -> OpResult:
        return self._adapter._call("runtime.sendMessage", _not_implemented("runtime.sendMessage"))


class StorageArea:
    """One storage area (`sync`) backed by the host's flat settings store."""

    def __init__(self, adapter: ChromeAdapter, store: MutableMapping[str, Any]) -> None:
        self._adapter = adapter
        self._store = store

    def get(self, keys: Any = UNDEFINED) -> OpResult:
        return self._adapter._call("storage.sync.get", lambda: self._get(keys))

    def set(self, keys: Any = UNDEFINED) -> OpResult:
        return self._adapter._call("storage.sync.set", lambda: self._set(keys))

    def _get(self, keys: Any) -> dict[str, Any]:
        spec = parse_keys(keys)
        store = self._store
        diagnostics = self._adapter.diagnostics

        if isinstance(spec, NoKeys):
            # Only `null` returns stored values; other falsy arguments select nothing.
            return {}
        if isinstance(spec, AllKeys):
            return {k: store[k] for k in store}
        if isinstance(spec, SingleKey):
            return {spec.key: store.get(spec.key, UNDEFINED)}
        if isinstance(spec, KeyList):
            for _ in spec.invalid:
                diagnostics.report(TypeError(_MSG_ARRAY_ITEM))
            return {key: store.get(key, UNDEFINED) for key in spec.keys}
        if isinstance(spec, DefaultsMap):
            if not spec.defaults:
                diagnostics.report(ValueError(_MSG_NO_OWN_PROPERTY))
            items: dict[str, Any] = {}
            for key, default in spec.defaults.items():
                value = store.get(key, UNDEFINED)
                items[key] = default if value is UNDEFINED else value
            return items
        raise TypeError(f"Unsupported keys argument: {type(keys).__name__}")

    def _set(self, keys: Any) -> int:
        diagnostics = self._adapter.diagnostics
        if not isinstance(keys, Mapping) and (not keys or isinstance(keys, (str, list, tuple))):
            diagnostics.report(TypeError(_MSG_SET_NOT_OBJECT))

        # Best-effort: strings and lists still write their items under index keys.
        props = own_properties(keys)
        if props is None:
            raise TypeError(_MSG_NULL_TO_OBJECT)
        if not props:
            diagnostics.report(ValueError(_MSG_NO_OWN_PROPERTY))
            return 0

        self._store.update(props)
        return 0


class Storage:
    def __init__(self, adapter: ChromeAdapter, store: MutableMapping[str, Any]) -> None:
        self.sync = StorageArea(adapter, store)


class Tabs:
    def __init__(self, adapter: ChromeAdapter, registry: WindowRegistry) -> None:
        self._adapter = adapter
        self._registry = registry

    def query(self, query_info: Any = UNDEFINED) -> OpResult:
        return self._adapter._call("tabs.query", lambda: self._query(query_info))

    def send_message(self, tab_id: Any, message: Any = UNDEFINED, options: Any = UNDEFINED) -> OpResult:
        return self._adapter._call("tabs.sendMessage", _not_implemented("tabs.sendMessage"))

    def _query(self, query_info: Any) -> list[dict[str, Any]]:
        if isinstance(query_info, (list, tuple)):
            # Lists are objects without query properties: match every tab.
            query_info = {}
        if not isinstance(query_info, Mapping):
            self._adapter.diagnostics.report(ValueError(_MSG_NO_QUERY))
            return []

        if query_info.get("currentWindow"):
            windows = [resolve_current_window(self._registry)]
        else:
            windows = list(self._registry.browser_windows())

        tabs = active_tabs(windows) if query_info.get("active") is True else all_tabs(windows)
        return [record.to_dict() for record in make_tab_records(tabs)]


def _not_implemented(method: str) -> Callable[[], Any]:
    def _raise() -> Any:
        raise NotImplementedError(f"{method} is not implemented")

    return _raise


class ChromeAdapter:
    def __init__(
        self,
        store: MutableMapping[str, Any],
        registry: WindowRegistry,
        *,
        diagnostics: DiagnosticLog | None = None,
    ) -> None:
        self.diagnostics = diagnostics or DiagnosticLog(store)
        self.runtime = Runtime(self)
        self.storage = Storage(self, store)
        self.tabs = Tabs(self, registry)

    def _call(self, method: str, fn: Callable[[], Any]) -> OpResult:
        try:
            return OpResult.success(fn())
        except Exception as exc:  # noqa: BLE001
            _LOGGER.info("op_failed method=%s error=%s", method, exc)
            self.runtime.last_error = exc
            return OpResult.failure(exc)


__all__ = ["ChromeAdapter", "Runtime", "Storage", "StorageArea", "Tabs"]
