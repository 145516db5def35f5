"""Safe loading helpers."""

import json
from pathlib import Path


def load_json(path: str | Path) -> dict:
    """Read a JSON object from disk; missing or unreadable files yield {}."""
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}
