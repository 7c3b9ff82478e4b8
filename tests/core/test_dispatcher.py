"""
Tests for UiDispatcher thread affinity and hand-off.
"""
import asyncio

import pytest

from paneview.core.dispatch import DispatchThreadError, UiDispatcher


@pytest.mark.asyncio
async def test_assert_dispatch_thread():
    dispatcher = UiDispatcher.current()
    dispatcher.assert_dispatch_thread("test")
    loop = asyncio.get_running_loop()

    assert not await loop.run_in_executor(None, dispatcher.is_dispatch_thread)
    with pytest.raises(DispatchThreadError):
        await loop.run_in_executor(None, dispatcher.assert_dispatch_thread, "test")


@pytest.mark.asyncio
async def test_invoke_runs_inline_on_dispatch_thread():
    dispatcher = UiDispatcher.current()
    calls = []
    dispatcher.invoke(calls.append, 1)
    assert calls == [1]


@pytest.mark.asyncio
async def test_invoke_from_worker_is_queued_to_loop():
    dispatcher = UiDispatcher.current()
    threads = []

    def record():
        threads.append(dispatcher.is_dispatch_thread())

    await asyncio.get_running_loop().run_in_executor(None, dispatcher.invoke, record)
    await asyncio.sleep(0.01)
    assert threads == [True]


@pytest.mark.asyncio
async def test_call_later():
    dispatcher = UiDispatcher.current()
    calls = []
    dispatcher.call_later(0.01, calls.append, "fired")
    await asyncio.sleep(0.05)
    assert calls == ["fired"]
