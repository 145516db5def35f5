"""Very small event bus for inter-module communication."""

import threading
from collections import defaultdict
from collections.abc import Callable

from utils.log_utils import tprint


class EventBus:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Callable]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Callable) -> None:
        with self._lock:
            self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Callable) -> None:
        with self._lock:
            handlers = self._subscribers.get(topic, [])
            if handler in handlers:
                handlers.remove(handler)

    def publish(self, topic: str, payload: dict | None = None) -> None:
        with self._lock:
            handlers = list(self._subscribers.get(topic, []))
        for handler in handlers:
            # Subscriber errors are logged, never raised to the publisher.
            try:
                handler(payload or {})
            except Exception as exc:
                tprint(f"[EVENTS][ERROR] handler for '{topic}' failed: {exc}")
