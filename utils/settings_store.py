"""In-memory cache for app settings."""

from __future__ import annotations

import os
import threading
from typing import Any

from utils.file_utils import load_json
from utils.log_utils import tprint

DEFAULT_SETTINGS_PATH = "config/app_settings.json"

DEFAULTS: dict[str, Any] = {
    "port": 9999,
    "machine_identifier": "mac01",
    "bind_host": "0.0.0.0",
    "action_delay_secs": 3.0,
    "log_capacity": 100,
    "recv_buffer_bytes": 65535,
    "dry_run": False,
    "cancel_pending_on_stop": False,
    "host_os": None,
    "log_console": True,
    "log_level": "INFO",
    "http_access_log": False,
}

_lock = threading.Lock()
_settings_cache: dict[str, Any] = {}


def settings_path() -> str:
    return os.getenv("REMOTE_SHUTDOWN_SETTINGS", DEFAULT_SETTINGS_PATH)


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    port = os.getenv("REMOTE_SHUTDOWN_PORT")
    if port and port.strip().isdigit():
        overrides["port"] = int(port)
    machine_id = os.getenv("REMOTE_SHUTDOWN_MACHINE_ID")
    if machine_id and machine_id.strip():
        overrides["machine_identifier"] = machine_id.strip()
    dry_run = os.getenv("REMOTE_SHUTDOWN_DRY_RUN")
    if dry_run is not None:
        overrides["dry_run"] = dry_run.strip().lower() in {"1", "true", "yes", "on"}
    return overrides


def refresh_settings() -> dict[str, Any]:
    """Reload settings from disk and replace the cache; environment wins over the file."""
    data = dict(DEFAULTS)
    data.update(load_json(settings_path()))
    data.update(_env_overrides())
    with _lock:
        _settings_cache.clear()
        _settings_cache.update(data)
        return dict(_settings_cache)


def get_settings() -> dict[str, Any]:
    """Return a copy of the cached settings."""
    with _lock:
        if _settings_cache:
            return dict(_settings_cache)
    return refresh_settings()


def is_deep_logging() -> bool:
    """Return True when log_level requests deep tracing."""
    level = str(get_settings().get("log_level", "")).upper()
    return level in {"DEEP"}


def deep_log(message: str) -> None:
    if is_deep_logging():
        tprint(message)
