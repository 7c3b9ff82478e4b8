"""
Alarm - debounced request scheduling on the dispatch loop.

Only the most recent request within the delay window runs: scheduling
a new request cancels the pending one.
"""
import asyncio
from typing import Callable, Optional

from loguru import logger

from ..dispatch import UiDispatcher


class Alarm:
    """
    One pending request at a time, fired after a delay.

    Usage:
        alarm = Alarm(dispatcher, delay=0.3, name="autoscroll")
        alarm.add_request(lambda: scroll_from_source(False))
        alarm.cancel_all_requests()
    """

    def __init__(self, dispatcher: UiDispatcher, delay: float, name: str = "Alarm"):
        self._dispatcher = dispatcher
        self.delay = delay
        self.name = name
        self._handle: Optional[asyncio.TimerHandle] = None
        self._disposed = False

    @property
    def is_pending(self) -> bool:
        return self._handle is not None

    def add_request(self, request: Callable[[], None], delay: Optional[float] = None) -> None:
        """
        Schedule request, replacing any pending one.

        Args:
            request: Zero-argument callable run on the dispatch thread
            delay: Seconds to wait, defaults to the alarm delay
        """
        self._dispatcher.invoke(self._schedule, request, self.delay if delay is None else delay)

    def _schedule(self, request: Callable[[], None], delay: float) -> None:
        if self._disposed:
            logger.debug(f"Alarm '{self.name}' disposed, request ignored")
            return
        self.cancel_all_requests()
        self._handle = self._dispatcher.call_later(delay, self._fire, request)

    def cancel_all_requests(self) -> int:
        """Cancel the pending request. Returns the number cancelled."""
        if self._handle is None:
            return 0
        self._handle.cancel()
        self._handle = None
        return 1

    def _fire(self, request: Callable[[], None]) -> None:
        self._handle = None
        try:
            request()
        except Exception as e:
            logger.error(f"Alarm '{self.name}' request failed: {e}")

    def dispose(self) -> None:
        self.cancel_all_requests()
        self._disposed = True
