import threading
from typing import Any, Callable, List


class MarkerBatch:
    """Markers queued from any thread and published together on flush()."""

    def __init__(self, publish: Callable[[List[Any]], None]):
        self._publish = publish
        self._pending: List[Any] = []
        self._lock = threading.Lock()

    def add(self, marker: Any):
        with self._lock:
            self._pending.append(marker)

    def discard(self):
        with self._lock:
            self._pending = []

    def __len__(self):
        with self._lock:
            return len(self._pending)

    def flush(self) -> int:
        with self._lock:
            pending, self._pending = self._pending, []
        if pending:
            self._publish(pending)
        return len(pending)
