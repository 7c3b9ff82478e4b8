"""
Tests for the synchronous Signal observer.
"""
from unittest.mock import MagicMock

from paneview.core.events import Signal


def test_signal_emit_and_disconnect():
    sig = Signal("test_signal")
    handler = MagicMock()

    sig.connect(handler)
    sig.emit("data", 123)
    handler.assert_called_once_with("data", 123)

    sig.disconnect(handler)
    sig.emit("data2")
    assert handler.call_count == 1


def test_connect_twice_is_noop():
    sig = Signal()
    handler = MagicMock()
    sig.connect(handler)
    sig.connect(handler)
    assert len(sig) == 1
    sig.emit()
    handler.assert_called_once()


def test_failing_subscriber_does_not_stop_others(log_records):
    sig = Signal("fragile")
    received = []

    def broken(value):
        raise RuntimeError("boom")

    sig.connect(broken)
    sig.connect(received.append)
    sig.emit(7)

    assert received == [7]
    assert any(r["level"].name == "ERROR" for r in log_records)


def test_subscriber_may_disconnect_itself():
    sig = Signal()
    calls = []

    def once():
        calls.append(1)
        sig.disconnect(once)

    sig.connect(once)
    sig.emit()
    sig.emit()
    assert calls == [1]
