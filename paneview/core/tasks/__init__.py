"""
Scheduling primitives for the UI actor.

- Alarm: debounced single-slot request scheduling
- CoalescingLookupQueue: cancellable, coalescible background lookups
"""
from .alarm import Alarm
from .lookups import CoalescingLookupQueue, LookupHandle

__all__ = ["Alarm", "CoalescingLookupQueue", "LookupHandle"]
