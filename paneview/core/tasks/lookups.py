"""
CoalescingLookupQueue - cancellable background lookups for the UI actor.

A lookup is a coroutine started on the dispatch loop; blocking parts
are pushed to a worker pool with `run_in_background`. Results come back
on the dispatch thread, unless the lookup was superseded (same coalescing
key), cancelled, or expired in the meantime.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

from loguru import logger

from ..dispatch import UiDispatcher


class LookupHandle:
    """Handle to one submitted lookup."""

    def __init__(self, key: Optional[Hashable], expire_when: Optional[Callable[[], bool]] = None):
        self.key = key
        self._expire_when = expire_when
        self._cancelled = False
        self.task: Optional[asyncio.Task] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self.task is not None and self.task.done()

    @property
    def expired(self) -> bool:
        if self._cancelled:
            return True
        if self._expire_when is None:
            return False
        try:
            return bool(self._expire_when())
        except Exception as e:
            logger.error(f"Lookup expiry check failed: {e}")
            return True

    def cancel(self) -> None:
        """Cancel the lookup. Safe to call repeatedly and after completion."""
        self._cancelled = True
        if self.task is not None and not self.task.done():
            self.task.cancel()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else ("done" if self.done else "pending")
        return f"LookupHandle(key={self.key!r}, {state})"


class CoalescingLookupQueue:
    """
    Runs lookups off the critical path and delivers results on the actor.

    Usage:
        queue = CoalescingLookupQueue(dispatcher, max_workers=2)
        queue.submit(
            lambda: find_element(offset),
            on_done=select_element,
            coalesce_by="caret",
            expire_when=editor.is_disposed,
        )
    """

    def __init__(self, dispatcher: UiDispatcher, max_workers: int = 2, name: str = "lookup"):
        self._dispatcher = dispatcher
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._inflight: Dict[Hashable, LookupHandle] = {}
        self._handles: set = set()
        self._shutdown = False

    @property
    def pending_count(self) -> int:
        return len(self._handles)

    async def run_in_background(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Await fn(*args) on the worker pool."""
        return await self._dispatcher.loop.run_in_executor(self._executor, fn, *args)

    def submit(self,
               compute: Callable[[], Awaitable[Any]],
               on_done: Callable[[Any], None],
               coalesce_by: Optional[Hashable] = None,
               expire_when: Optional[Callable[[], bool]] = None) -> LookupHandle:
        """
        Start a lookup.

        Args:
            compute: Coroutine factory producing the result
            on_done: Called with the result on the dispatch thread
            coalesce_by: Key; a newer lookup with the same key cancels this one
            expire_when: Predicate; when true at delivery the result is dropped

        Returns:
            LookupHandle for cancellation
        """
        self._dispatcher.assert_dispatch_thread("submit lookup")
        handle = LookupHandle(coalesce_by, expire_when)
        if self._shutdown:
            handle.cancel()
            return handle

        if coalesce_by is not None:
            previous = self._inflight.get(coalesce_by)
            if previous is not None:
                logger.debug(f"Lookup coalesced: {coalesce_by!r}")
                previous.cancel()
            self._inflight[coalesce_by] = handle

        handle.task = self._dispatcher.loop.create_task(self._run(handle, compute, on_done))
        # A task cancelled before its first step never enters _run
        handle.task.add_done_callback(lambda _task: self._forget(handle))
        self._handles.add(handle)
        return handle

    async def _run(self, handle: LookupHandle,
                   compute: Callable[[], Awaitable[Any]],
                   on_done: Callable[[Any], None]) -> None:
        try:
            result = await compute()
        except asyncio.CancelledError:
            logger.debug(f"Lookup cancelled: {handle.key!r}")
            return
        except Exception as e:
            logger.error(f"Lookup '{self.name}' failed: {e}")
            return
        finally:
            self._forget(handle)

        if handle.expired:
            logger.debug(f"Lookup result discarded: {handle.key!r}")
            return
        try:
            on_done(result)
        except Exception as e:
            logger.error(f"Lookup '{self.name}' callback failed: {e}")

    def _forget(self, handle: LookupHandle) -> None:
        self._handles.discard(handle)
        if handle.key is not None and self._inflight.get(handle.key) is handle:
            del self._inflight[handle.key]

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            handle.cancel()

    async def shutdown(self) -> None:
        """Cancel pending lookups and stop the worker pool."""
        self._shutdown = True
        tasks = [h.task for h in self._handles if h.task is not None]
        self.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._executor.shutdown(wait=False)
        logger.debug(f"Lookup queue '{self.name}' shut down")
