"""Host settings store backends.

The adapter only needs a flat `MutableMapping[str, Any]`. Two backends:
- MemorySettingsStore: plain dict, lives as long as the process.
- JsonFileSettingsStore: dict persisted to a JSON snapshot after every change
  (`update()` batches many keys into one write).

Persistence
- Atomic writes: write temp file then replace.
- Best-effort: a corrupt or missing file loads as an empty store.
- This is NOT encrypted.
"""

from __future__ import annotations

import json
import logging
import os
import time
from collections.abc import Iterator, MutableMapping
from contextlib import suppress
from pathlib import Path
from typing import Any

_LOGGER = logging.getLogger("chrome_shim.settings_store")

SNAPSHOT_VERSION = 1


class MemorySettingsStore(MutableMapping[str, Any]):
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._items: dict[str, Any] = dict(initial or {})

    def __getitem__(self, key: str) -> Any:
        return self._items[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._items[key] = value

    def __delitem__(self, key: str) -> None:
        del self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> dict[str, Any]:
        return dict(self._items)


def load_items(path: Path) -> dict[str, Any]:
    try:
        if not path.exists() or not path.is_file():
            return {}
        obj = json.loads(path.read_text(encoding="utf-8", errors="replace"))
    except Exception:
        _LOGGER.warning("settings file unreadable, starting empty: %s", path)
        return {}

    if not isinstance(obj, dict):
        return {}
    items = obj.get("items")
    if not isinstance(items, dict):
        return {}
    return {k: v for k, v in items.items() if isinstance(k, str)}


def save_items(path: Path, items: dict[str, Any]) -> dict[str, Any]:
    path.parent.mkdir(parents=True, exist_ok=True)

    now_ms = int(time.time() * 1000)
    payload = {"version": SNAPSHOT_VERSION, "updatedAt": now_ms, "items": items}
    # Values JSON cannot represent are kept in their textual form.
    text = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True, default=str)

    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    with suppress(Exception):
        os.chmod(tmp, 0o600)
    tmp.replace(path)
    with suppress(Exception):
        os.chmod(path, 0o600)

    return {"ok": True, "path": str(path), "updatedAt": now_ms, "keys": len(items)}


class JsonFileSettingsStore(MemorySettingsStore):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(load_items(self.path))

    def __setitem__(self, key: str, value: Any) -> None:
        super().__setitem__(key, value)
        self.flush()

    def __delitem__(self, key: str) -> None:
        super().__delitem__(key)
        self.flush()

    def update(self, other: Any = (), /, **kwds: Any) -> None:
        """Merge many keys with a single write to disk."""
        changes = dict(other, **kwds)
        if not changes:
            return
        self._items.update(changes)
        self.flush()

    def flush(self) -> dict[str, Any]:
        return save_items(self.path, self._items)


__all__ = ["JsonFileSettingsStore", "MemorySettingsStore", "load_items", "save_items"]
