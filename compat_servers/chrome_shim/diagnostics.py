from __future__ import annotations

import logging
import time
from collections.abc import MutableMapping
from typing import Any

_LOGGER = logging.getLogger("chrome_shim.diagnostics")

LOGS_KEY = "logs"


def ensure_logs(store: MutableMapping[str, Any]) -> list[Any]:
    """Initialise the persisted logs collection if it is missing."""
    logs = store.get(LOGS_KEY)
    if not isinstance(logs, list):
        logs = []
        store[LOGS_KEY] = logs
    return logs


class DiagnosticLog:
    """Non-fatal argument errors: logged and kept in the store's `logs` entry.

    Reporting never aborts the calling operation. Persistence is bounded to the
    newest `max_entries` entries; `max_entries=0` only logs.
    """

    def __init__(self, store: MutableMapping[str, Any], *, max_entries: int = 200) -> None:
        self._store = store
        self._max_entries = max(0, int(max_entries))

    def report(self, error: BaseException | str) -> dict[str, Any]:
        message = str(error)
        _LOGGER.warning("diagnostic: %s", message)
        entry = {"ts": int(time.time() * 1000), "level": "error", "message": message}
        if self._max_entries <= 0:
            return entry

        logs = list(ensure_logs(self._store))
        logs.append(entry)
        if len(logs) > self._max_entries:
            del logs[: len(logs) - self._max_entries]
        # Reassign so persisting stores see the change.
        self._store[LOGS_KEY] = logs
        return entry


__all__ = ["LOGS_KEY", "DiagnosticLog", "ensure_logs"]
