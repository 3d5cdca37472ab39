from __future__ import annotations

import json
from typing import Any

import pytest

_TARGETS = [
    {"id": "p2", "type": "page", "url": "https://b.example", "title": "B"},
    {"id": "sw", "type": "service_worker", "url": "chrome-extension://x/bg.js"},
    {"id": "p1", "type": "page", "url": "https://a.example", "title": "A"},
    {"id": "p3", "type": "page", "url": "https://c.example", "title": "C"},
]
_WINDOWS = {"p1": 1, "p2": 2, "p3": 1}


class _FakeWs:
    def __init__(self, windows: dict[str, int]) -> None:
        self._windows = windows
        self._pending: list[str] = []
        self.closed = False

    def send(self, raw: str) -> None:
        msg = json.loads(raw)
        assert msg["method"] == "Browser.getWindowForTarget"
        target = msg["params"]["targetId"]
        # An unrelated event arrives before the response.
        self._pending.append(json.dumps({"method": "Target.targetInfoChanged", "params": {}}))
        if target in self._windows:
            self._pending.append(json.dumps({"id": msg["id"], "result": {"windowId": self._windows[target]}}))
        else:
            self._pending.append(json.dumps({"id": msg["id"], "error": {"message": "No target with given id"}}))

    def recv(self) -> str:
        return self._pending.pop(0)

    def close(self) -> None:
        self.closed = True


def _patch_cdp(monkeypatch: pytest.MonkeyPatch, targets: list[dict[str, Any]], windows: dict[str, int]) -> list[_FakeWs]:
    from compat_servers.chrome_shim import cdp_host

    def fake_get_json(url: str, timeout: float = 2.0) -> Any:
        if url.endswith("/json/list"):
            return targets
        if url.endswith("/json/version"):
            return {"webSocketDebuggerUrl": "ws://127.0.0.1:9222/devtools/browser/abc"}
        raise AssertionError(url)

    sockets: list[_FakeWs] = []

    def fake_connect(ws_url: str, timeout: float) -> _FakeWs:
        ws = _FakeWs(windows)
        sockets.append(ws)
        return ws

    monkeypatch.setattr(cdp_host, "_http_get_json", fake_get_json)
    monkeypatch.setattr(cdp_host, "_create_connection", fake_connect)
    return sockets


def test_snapshot_groups_pages_by_window(monkeypatch: pytest.MonkeyPatch) -> None:
    from compat_servers.chrome_shim.cdp_host import CdpWindowRegistry

    sockets = _patch_cdp(monkeypatch, _TARGETS, _WINDOWS)
    registry = CdpWindowRegistry(9222)

    windows = registry.browser_windows()
    assert [w.window_id for w in windows] == [2, 1]
    assert [[t.id for t in w.tabs] for w in windows] == [["p2"], ["p1", "p3"]]
    assert windows[1].active_tab is not None and windows[1].active_tab.id == "p1"
    assert registry.active_window() is None
    focused = registry.last_focused_window()
    assert focused is not None and focused.window_id == 2
    assert all(ws.closed for ws in sockets)


def test_adapter_over_cdp_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    from compat_servers.chrome_shim.adapter import ChromeAdapter
    from compat_servers.chrome_shim.cdp_host import CdpWindowRegistry
    from compat_servers.chrome_shim.settings_store import MemorySettingsStore

    _patch_cdp(monkeypatch, _TARGETS, _WINDOWS)
    adapter = ChromeAdapter(MemorySettingsStore(), CdpWindowRegistry(9222))

    assert adapter.tabs.query({"currentWindow": True, "active": True}).value == [{"id": "p2"}]
    assert adapter.tabs.query({"active": True}).value == [{"id": "p2"}, {"id": "p1"}]
    assert adapter.tabs.query({}).value == [{"id": "p2"}, {"id": "p1"}, {"id": "p3"}]


def test_cdp_errors_surface_as_error_results(monkeypatch: pytest.MonkeyPatch) -> None:
    from compat_servers.chrome_shim.adapter import ChromeAdapter
    from compat_servers.chrome_shim.cdp_host import CdpHostError, CdpWindowRegistry
    from compat_servers.chrome_shim.settings_store import MemorySettingsStore

    _patch_cdp(monkeypatch, _TARGETS, {"p1": 1})
    adapter = ChromeAdapter(MemorySettingsStore(), CdpWindowRegistry(9222))

    res = adapter.tabs.query({})
    assert res.legacy() == -1
    assert isinstance(res.error, CdpHostError)
    assert "No target with given id" in (res.error_message or "")


def test_no_pages_means_no_current_window(monkeypatch: pytest.MonkeyPatch) -> None:
    from compat_servers.chrome_shim.cdp_host import CdpWindowRegistry

    _patch_cdp(monkeypatch, [], {})
    registry = CdpWindowRegistry(9222)

    assert registry.browser_windows() == []
    assert registry.last_focused_window() is None


def test_unreachable_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    from compat_servers.chrome_shim import cdp_host

    def refuse(url: str, timeout: float = 2.0) -> Any:
        raise cdp_host.CdpHostError("CDP endpoint not reachable: refused")

    monkeypatch.setattr(cdp_host, "_http_get_json", refuse)
    with pytest.raises(cdp_host.CdpHostError):
        cdp_host.CdpWindowRegistry(1).browser_windows()
