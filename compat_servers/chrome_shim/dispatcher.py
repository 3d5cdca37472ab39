"""
Channel dispatch for host message events.

Each inbound event names a channel (`wrapper.storage.sync.get`, ...) and
carries a JSON message. The dispatcher runs the matching adapter operation and
answers through the event's responder on the mirrored `chrome.*` channel.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from .adapter import ChromeAdapter
from .result import UNDEFINED, OpResult, error_message, to_json_text

logger = logging.getLogger("chrome_shim.dispatcher")

ROUTE_STORAGE_GET = "storage.sync.get"
ROUTE_STORAGE_SET = "storage.sync.set"
ROUTE_RUNTIME_SEND_MESSAGE = "runtime.sendMessage"
ROUTE_TABS_QUERY = "tabs.query"

RouteFunc = Callable[[ChromeAdapter, dict[str, Any]], OpResult]


class Responder(Protocol):
    def dispatch_message(self, channel: str, payload: str) -> None: ...


@dataclass(slots=True)
class HostEvent:
    """One inbound message event: channel name, JSON text, reply target."""

    name: str
    message: str
    target: Responder


def _route_storage_get(adapter: ChromeAdapter, message: dict[str, Any]) -> OpResult:
    return adapter.storage.sync.get(message.get("keys", UNDEFINED))


def _route_storage_set(adapter: ChromeAdapter, message: dict[str, Any]) -> OpResult:
    return adapter.storage.sync.set(message.get("keys", UNDEFINED))


def _route_runtime_send_message(adapter: ChromeAdapter, message: dict[str, Any]) -> OpResult:
    return adapter.runtime.send_message(message.get("message", UNDEFINED))


def _route_tabs_query(adapter: ChromeAdapter, message: dict[str, Any]) -> OpResult:
    return adapter.tabs.query(message.get("query", UNDEFINED))


DEFAULT_ROUTES: dict[str, RouteFunc] = {
    ROUTE_STORAGE_GET: _route_storage_get,
    ROUTE_STORAGE_SET: _route_storage_set,
    ROUTE_RUNTIME_SEND_MESSAGE: _route_runtime_send_message,
    ROUTE_TABS_QUERY: _route_tabs_query,
}


class Dispatcher:
    """Routes host events to adapter operations and sends back the envelope."""

    def __init__(
        self,
        adapter: ChromeAdapter,
        *,
        request_prefix: str = "wrapper.",
        reply_prefix: str = "chrome.",
    ) -> None:
        self.adapter = adapter
        self.request_prefix = request_prefix
        self.reply_prefix = reply_prefix
        self._routes: dict[str, RouteFunc] = dict(DEFAULT_ROUTES)

    def route_for(self, name: str) -> str | None:
        route = name or ""
        if self.request_prefix and route.startswith(self.request_prefix):
            route = route[len(self.request_prefix) :]
        return route if route in self._routes else None

    def reply_channel(self, route: str) -> str:
        return f"{self.reply_prefix}{route}"

    @property
    def routes(self) -> list[str]:
        return list(self._routes.keys())

    def build_envelope(self, result: OpResult) -> dict[str, Any]:
        if not result.ok:
            err = self.adapter.runtime.last_error or result.error
            return {"name": "error", "response": error_message(err)}
        return {"name": "ok", "response": result.value}

    def handle(self, event: HostEvent) -> dict[str, Any] | None:
        """Handle one event to completion.

        Malformed message JSON raises `json.JSONDecodeError`; nothing is sent.
        Returns the envelope, or None when the channel is not handled here.
        """
        try:
            message = json.loads(event.message)
            if not isinstance(message, dict):
                message = {}

            route = self.route_for(event.name)
            if route is None:
                logger.debug("ignored channel=%s", event.name)
                return None

            result = self._routes[route](self.adapter, message)
            envelope = self.build_envelope(result)
            if not result.ok:
                logger.info("channel=%s error=%s", route, envelope["response"])
            event.target.dispatch_message(self.reply_channel(route), to_json_text(envelope))
            return envelope
        finally:
            # last_error only lives for the dispatch that produced it.
            self.adapter.runtime.last_error = None


__all__ = [
    "DEFAULT_ROUTES",
    "ROUTE_RUNTIME_SEND_MESSAGE",
    "ROUTE_STORAGE_GET",
    "ROUTE_STORAGE_SET",
    "ROUTE_TABS_QUERY",
    "Dispatcher",
    "HostEvent",
    "Responder",
    "RouteFunc",
]
