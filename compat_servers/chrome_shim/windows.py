"""Window/tab accessor.

Host windows and tabs are borrowed live handles; nothing here keeps them past
a single call. Handles are reduced to a minimal Tab Record (`{"id": ...}`);
other tab attributes are host-specific and deliberately not exposed.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol


class TabHandle(Protocol):
    @property
    def id(self) -> Any: ...


class WindowHandle(Protocol):
    @property
    def tabs(self) -> Sequence[TabHandle]: ...

    @property
    def active_tab(self) -> TabHandle | None: ...


class WindowRegistry(Protocol):
    def browser_windows(self) -> list[WindowHandle]: ...

    def active_window(self) -> WindowHandle | None: ...

    def last_focused_window(self) -> WindowHandle | None: ...


@dataclass(slots=True, frozen=True)
class TabRecord:
    id: Any

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id}


def resolve_current_window(registry: WindowRegistry) -> WindowHandle:
    """Best-effort stand-in for the window the caller is running in.

    Hosts have no notion of the "currently executing" window, so the active
    window is used, falling back to the last focused one. A request coming from
    an unfocused window resolves to the wrong window.
    """
    window = registry.active_window()
    if window is None:
        window = registry.last_focused_window()
    if window is None:
        raise LookupError("No current window")
    return window


def active_tabs(windows: Iterable[WindowHandle]) -> list[TabHandle]:
    return [w.active_tab for w in windows if w.active_tab is not None]


def all_tabs(windows: Iterable[WindowHandle]) -> list[TabHandle]:
    out: list[TabHandle] = []
    for w in windows:
        out.extend(w.tabs)
    return out


def make_tab_records(tabs: Iterable[TabHandle]) -> list[TabRecord]:
    return [TabRecord(id=tab.id) for tab in tabs]


# ─────────────────────────────────────────────────────────────────────────────
# In-memory host (tests, `memory` host mode)
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class StaticTab:
    id: Any
    url: str = ""
    title: str = ""


@dataclass(slots=True)
class StaticWindow:
    tabs: list[StaticTab] = field(default_factory=list)
    active_index: int | None = 0

    @property
    def active_tab(self) -> StaticTab | None:
        if self.active_index is None or not (0 <= self.active_index < len(self.tabs)):
            return None
        return self.tabs[self.active_index]


class StaticWindowRegistry:
    def __init__(
        self,
        windows: list[StaticWindow] | None = None,
        *,
        active: int | None = None,
        last_focused: int | None = None,
    ) -> None:
        self.windows: list[StaticWindow] = list(windows or [])
        self.active: int | None = active
        self.last_focused: int | None = last_focused

    def _pick(self, index: int | None) -> StaticWindow | None:
        if index is None or not (0 <= index < len(self.windows)):
            return None
        return self.windows[index]

    def browser_windows(self) -> list[StaticWindow]:
        return list(self.windows)

    def active_window(self) -> StaticWindow | None:
        return self._pick(self.active)

    def last_focused_window(self) -> StaticWindow | None:
        return self._pick(self.last_focused)


__all__ = [
    "StaticTab",
    "StaticWindow",
    "StaticWindowRegistry",
    "TabHandle",
    "TabRecord",
    "WindowHandle",
    "WindowRegistry",
    "active_tabs",
    "all_tabs",
    "make_tab_records",
    "resolve_current_window",
]
