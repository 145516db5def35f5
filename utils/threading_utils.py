"""Helpers for running modules concurrently."""

import threading
from collections.abc import Callable


def run_async(target: Callable, *, name: str | None = None, daemon: bool = True) -> threading.Thread:
    thread = threading.Thread(target=target, name=name, daemon=daemon)
    thread.start()
    return thread


def join_unless_current(thread: threading.Thread | None, timeout: float | None = None) -> None:
    """Join a worker thread; a thread cannot join itself, so that case is skipped."""
    if thread is None or thread is threading.current_thread():
        return
    thread.join(timeout=timeout)
