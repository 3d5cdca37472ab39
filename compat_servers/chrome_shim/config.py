from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _repo_root() -> Path:
    # compat_servers/chrome_shim/config.py -> repo root is parents[2]
    return Path(__file__).resolve().parents[2]


def expand_path(raw: str) -> str:
    return str(Path(raw).expanduser())


def default_settings_path() -> str:
    return str(_repo_root() / "data" / "settings" / "settings.json")


def _float_env(name: str, *, default: float, lo: float, hi: float) -> float:
    try:
        val = float(os.environ.get(name) or default)
    except Exception:
        val = default
    return max(lo, min(val, hi))


def _int_env(name: str, *, default: int, lo: int, hi: int) -> int:
    try:
        val = int(os.environ.get(name) or default)
    except Exception:
        val = default
    return max(lo, min(val, hi))


def _bool_env(name: str, *, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() not in {"", "0", "false", "no", "off"}


@dataclass
class ShimConfig:
    settings_path: str
    host: str = "cdp"
    cdp_port: int = 9222
    cdp_timeout: float = 2.0
    request_prefix: str = "wrapper."
    reply_prefix: str = "chrome."
    max_log_entries: int = 200
    debug: bool = False

    @staticmethod
    def normalize_host(raw: str | None) -> str:
        host = (raw or "").strip().lower()
        if host in {"memory", "mem", "static", "none"}:
            return "memory"
        if host in {"cdp", "chrome", "chromium", ""}:
            return "cdp"
        return "cdp"

    @classmethod
    def from_env(cls) -> ShimConfig:
        settings = os.environ.get("CHROME_SHIM_SETTINGS") or ""
        return cls(
            settings_path=expand_path(settings.strip()) if settings.strip() else default_settings_path(),
            host=cls.normalize_host(os.environ.get("CHROME_SHIM_HOST")),
            cdp_port=_int_env("CHROME_SHIM_CDP_PORT", default=9222, lo=1, hi=65535),
            cdp_timeout=_float_env("CHROME_SHIM_CDP_TIMEOUT", default=2.0, lo=0.2, hi=30.0),
            request_prefix=os.environ.get("CHROME_SHIM_REQUEST_PREFIX", "wrapper."),
            reply_prefix=os.environ.get("CHROME_SHIM_REPLY_PREFIX", "chrome."),
            max_log_entries=_int_env("CHROME_SHIM_MAX_LOGS", default=200, lo=0, hi=10_000),
            debug=_bool_env("CHROME_SHIM_DEBUG", default=False),
        )
