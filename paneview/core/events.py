import threading
from typing import Callable, List

from loguru import logger


class Signal:
    """
    Synchronous, thread-safe observer.

    Callbacks run on the emitting thread, in the order they were connected.
    The subscriber list is copied before delivery, so a callback may
    disconnect itself (or others) while being notified. Feeds emit from
    plugin threads, hence the lock.
    """
    def __init__(self, name: str = "Signal"):
        self.name = name
        self._lock = threading.Lock()
        self._callbacks: List[Callable] = []

    def connect(self, callback: Callable) -> Callable:
        """Subscribe callback. Connecting the same callback twice is a no-op."""
        with self._lock:
            if callback not in self._callbacks:
                self._callbacks.append(callback)
        return callback

    def disconnect(self, callback: Callable):
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def clear(self):
        with self._lock:
            self._callbacks = []

    def emit(self, *args, **kwargs):
        with self._lock:
            receivers = tuple(self._callbacks)
        for receiver in receivers:
            try:
                receiver(*args, **kwargs)
            except Exception as e:
                logger.error(f"Signal '{self.name}': subscriber {receiver!r} failed: {e}")

    def __len__(self) -> int:
        return len(self._callbacks)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, subscribers={len(self)})"
