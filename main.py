"""Entry point for the remote shutdown/reboot listener."""

import os
import sys
import threading
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from power_controller.controller import RemoteShutdownServer
from power_controller.errors import BindError
from utils.log_utils import tprint
from utils.settings_store import get_settings, refresh_settings


def _is_enabled(name: str, default: bool = True) -> bool:
    """Read a boolean-like environment variable (1/0/true/false)."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_env_files() -> None:
    """Load .env files from common locations (repo, bundle, home)."""
    candidates: list[Path] = []
    cwd = Path.cwd()
    candidates.extend([cwd / "env/.env", cwd / ".env"])

    module_root = Path(__file__).resolve().parent
    candidates.extend([module_root / "env/.env", module_root / ".env"])

    home = Path.home()
    candidates.append(home / ".remote-shutdown.env")

    if getattr(sys, "frozen", False):
        meipass = Path(getattr(sys, "_MEIPASS", ""))
        if meipass:
            candidates.extend([meipass / "env/.env", meipass / ".env"])

    for path in candidates:
        if path.exists():
            load_dotenv(dotenv_path=str(path), override=False)


def _start_listener(server: RemoteShutdownServer) -> bool:
    if not _is_enabled("AUTO_START", True):
        return False
    try:
        return server.start()
    except BindError:
        # already in the log and on the console
        return False


def _run_api() -> None:
    from api.server import app, server

    settings = get_settings()
    _start_listener(server)
    log_level = str(settings.get("log_level", "INFO")).upper()
    if log_level == "DEEP":
        log_level = "DEBUG"
    try:
        uvicorn.run(
            app,
            host=os.getenv("REMOTE_SHUTDOWN_API_HOST", "127.0.0.1"),
            port=int(os.getenv("REMOTE_SHUTDOWN_API_PORT", "8000")),
            log_level=log_level.lower(),
            access_log=bool(settings.get("http_access_log", False)),
        )
    finally:
        server.stop()


def _run_headless() -> None:
    server = RemoteShutdownServer.from_settings()
    if not _start_listener(server):
        raise SystemExit(1)
    stop_event = threading.Event()
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        tprint("[MAIN] Received interrupt. Shutting down...")
    finally:
        server.stop()


def bootstrap() -> None:
    """Load configuration, then serve the listener with or without the HTTP panel."""
    _load_env_files()
    refresh_settings()
    if _is_enabled("ENABLE_API", True):
        _run_api()
    else:
        _run_headless()


if __name__ == "__main__":
    bootstrap()
