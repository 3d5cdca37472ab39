"""Window registry backed by a Chromium DevTools endpoint.

- Page targets: HTTP `/json/list` (most recently activated first).
- Window membership: `Browser.getWindowForTarget` over the browser WebSocket.

CDP has no focus tracking, so `active_window()` is always None and the window
holding the most recently activated page stands in for the last focused one.
Every call takes a fresh snapshot; handles are not cached between calls.
"""

from __future__ import annotations

import json
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any
from urllib.error import URLError
from urllib.request import Request, urlopen

import websocket


class CdpHostError(Exception):
    pass


def _http_get_json(url: str, timeout: float = 2.0) -> Any:
    """Fetch JSON from URL."""
    try:
        req = Request(url, headers={"User-Agent": "chrome-shim"})
        with urlopen(req, timeout=timeout) as resp:
            return json.loads(resp.read().decode())
    except (URLError, OSError, ValueError) as exc:
        raise CdpHostError(f"CDP endpoint not reachable: {exc}") from exc


def _create_connection(ws_url: str, timeout: float) -> Any:
    return websocket.create_connection(ws_url, timeout=timeout)


class CdpConnection:
    """Minimal synchronous CDP command channel (events are skipped)."""

    def __init__(self, ws_url: str, timeout: float = 2.0) -> None:
        try:
            self.ws = _create_connection(ws_url, timeout)
        except Exception as exc:  # noqa: BLE001
            raise CdpHostError(f"CDP WebSocket connect failed: {exc}") from exc
        self._next_id = 1

    def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        msg_id = self._next_id
        self._next_id += 1
        msg: dict[str, Any] = {"id": msg_id, "method": method}
        if params:
            msg["params"] = params
        try:
            self.ws.send(json.dumps(msg))
            while True:
                data = json.loads(self.ws.recv())
                if not isinstance(data, dict) or data.get("id") != msg_id:
                    continue
                if "error" in data:
                    err = data.get("error") or {}
                    raise CdpHostError(f"{method} failed: {err.get('message') if isinstance(err, dict) else err}")
                result = data.get("result")
                return result if isinstance(result, dict) else {}
        except CdpHostError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise CdpHostError(str(exc)) from exc

    def close(self) -> None:
        with suppress(Exception):
            self.ws.close()


@dataclass(slots=True)
class CdpTab:
    id: str
    url: str = ""
    title: str = ""


@dataclass(slots=True)
class CdpWindow:
    window_id: int
    tabs: list[CdpTab] = field(default_factory=list)

    @property
    def active_tab(self) -> CdpTab | None:
        # /json/list order puts the most recently activated page first.
        return self.tabs[0] if self.tabs else None


class CdpWindowRegistry:
    def __init__(self, port: int = 9222, *, timeout: float = 2.0) -> None:
        self.port = int(port)
        self.timeout = float(timeout)

    @property
    def base_url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def _page_targets(self) -> list[dict[str, Any]]:
        raw = _http_get_json(f"{self.base_url}/json/list", timeout=self.timeout)
        if not isinstance(raw, list):
            return []
        return [t for t in raw if isinstance(t, dict) and t.get("type") == "page" and t.get("id")]

    def _browser_ws_url(self) -> str:
        version = _http_get_json(f"{self.base_url}/json/version", timeout=self.timeout)
        ws_url = version.get("webSocketDebuggerUrl") if isinstance(version, dict) else None
        if not ws_url:
            raise CdpHostError("CDP browser WebSocket URL not found")
        return str(ws_url)

    def snapshot(self) -> list[CdpWindow]:
        """Group current page targets into windows, in first-seen order."""
        targets = self._page_targets()
        if not targets:
            return []

        windows: dict[int, CdpWindow] = {}
        conn = CdpConnection(self._browser_ws_url(), timeout=self.timeout)
        try:
            for t in targets:
                res = conn.send("Browser.getWindowForTarget", {"targetId": t["id"]})
                window_id = res.get("windowId")
                if not isinstance(window_id, int):
                    raise CdpHostError(f"No window for target {t['id']}")
                window = windows.setdefault(window_id, CdpWindow(window_id=window_id))
                window.tabs.append(CdpTab(id=str(t["id"]), url=str(t.get("url") or ""), title=str(t.get("title") or "")))
        finally:
            conn.close()
        return list(windows.values())

    def browser_windows(self) -> list[CdpWindow]:
        return self.snapshot()

    def active_window(self) -> CdpWindow | None:
        return None

    def last_focused_window(self) -> CdpWindow | None:
        windows = self.snapshot()
        return windows[0] if windows else None


__all__ = ["CdpConnection", "CdpHostError", "CdpTab", "CdpWindow", "CdpWindowRegistry"]
