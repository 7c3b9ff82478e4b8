"""
UI Dispatcher - the single actor that owns navigator UI state.

All view-state mutation happens on one asyncio loop, driven by one thread.
Callbacks arriving from plugin loaders or worker threads are handed back
to that loop with `invoke` / `invoke_later`.
"""
import asyncio
import threading
from typing import Any, Callable, Optional

from loguru import logger


class DispatchThreadError(AssertionError):
    """A UI-only entry point was called off the dispatch thread."""


class UiDispatcher:
    """
    Binds an asyncio loop to the thread that runs it.

    Usage:
        dispatcher = UiDispatcher.current()   # inside the running loop
        dispatcher.assert_dispatch_thread("add pane")
        dispatcher.invoke(update_tabs)         # inline here, queued elsewhere
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, thread_id: Optional[int] = None):
        self.loop = loop
        self._thread_id = thread_id if thread_id is not None else threading.get_ident()

    @classmethod
    def current(cls) -> 'UiDispatcher':
        """Bind to the running loop and the calling thread."""
        return cls(asyncio.get_running_loop(), threading.get_ident())

    def is_dispatch_thread(self) -> bool:
        return threading.get_ident() == self._thread_id

    def assert_dispatch_thread(self, what: str = "operation") -> None:
        if not self.is_dispatch_thread():
            raise DispatchThreadError(
                f"{what} must run on the dispatch thread "
                f"(current: {threading.current_thread().name})"
            )

    def invoke_later(self, fn: Callable, *args: Any) -> None:
        """Queue fn on the dispatch loop. Safe from any thread."""
        if self.loop.is_closed():
            logger.debug(f"Dispatch loop closed, dropping {fn}")
            return
        self.loop.call_soon_threadsafe(fn, *args)

    def invoke(self, fn: Callable, *args: Any) -> None:
        """Run fn now when already on the dispatch thread, else queue it."""
        if self.is_dispatch_thread():
            fn(*args)
        else:
            self.invoke_later(fn, *args)

    def call_later(self, delay: float, fn: Callable, *args: Any) -> asyncio.TimerHandle:
        self.assert_dispatch_thread("call_later")
        return self.loop.call_later(delay, fn, *args)
