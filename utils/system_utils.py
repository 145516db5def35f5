"""System helpers for environment checks."""

import platform


def current_os() -> str:
    """platform.system() spelling of the running OS ("Darwin", "Windows", "Linux")."""
    return platform.system()


def normalize_os_name(value: str | None) -> str | None:
    """Map loose OS names ("mac", "win32", "gnu/linux") onto platform.system() spellings."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    lower = text.lower()
    if lower in {"darwin", "mac", "macos", "mac os", "mac os x", "osx"}:
        return "Darwin"
    if lower in {"windows", "win32", "win"}:
        return "Windows"
    if lower in {"linux", "gnu/linux"}:
        return "Linux"
    return text
