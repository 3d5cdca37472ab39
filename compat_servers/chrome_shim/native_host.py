"""Native messaging host for the chrome.* compatibility shim.

Launched by the browser when the extension connects natively. Reads message
events from stdin, answers on stdout (both native messaging framed).
"""

from __future__ import annotations

import logging
import sys

from .adapter import ChromeAdapter
from .cdp_host import CdpWindowRegistry
from .config import ShimConfig
from .diagnostics import DiagnosticLog, ensure_logs
from .dispatcher import Dispatcher
from .native_messaging import serve
from .settings_store import JsonFileSettingsStore
from .windows import StaticWindowRegistry, WindowRegistry

logger = logging.getLogger("chrome_shim")


def build_dispatcher(config: ShimConfig) -> Dispatcher:
    store = JsonFileSettingsStore(config.settings_path)
    ensure_logs(store)

    registry: WindowRegistry
    if config.host == "memory":
        registry = StaticWindowRegistry()
    else:
        registry = CdpWindowRegistry(config.cdp_port, timeout=config.cdp_timeout)

    adapter = ChromeAdapter(
        store,
        registry,
        diagnostics=DiagnosticLog(store, max_entries=config.max_log_entries),
    )
    return Dispatcher(adapter, request_prefix=config.request_prefix, reply_prefix=config.reply_prefix)


def main() -> None:
    config = ShimConfig.from_env()
    # Native messaging requires strict stdout framing. Logs go to stderr.
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )
    dispatcher = build_dispatcher(config)
    logger.info("host=%s settings=%s routes=%s", config.host, config.settings_path, dispatcher.routes)
    try:
        handled = serve(dispatcher, sys.stdin.buffer, sys.stdout.buffer)
    except KeyboardInterrupt:
        raise SystemExit(0) from None
    logger.info("stdin closed after %d events", handled)


if __name__ == "__main__":
    main()
