"""
Core infrastructure for the navigator subsystem.

- BaseSystem: async lifecycle base
- ConfigManager: pydantic-validated configuration with persistence
- Signal: synchronous observer
- UiDispatcher: the single UI actor (asyncio loop + owning thread)
- Alarm / CoalescingLookupQueue: debounce and cancellable background lookups
- Plugin / PluginManager: plugin lifecycle
"""
from .base_system import BaseSystem
from .config import (
    ConfigManager,
    AppConfig,
    GeneralSettings,
    NavigatorSettings,
)
from .dispatch import UiDispatcher, DispatchThreadError
from .events import Signal
from .logging import setup_logging
from .tasks import Alarm, CoalescingLookupQueue, LookupHandle
from .plugins import Plugin, PluginState, PluginManager

__all__ = [
    "BaseSystem",
    "ConfigManager",
    "AppConfig",
    "GeneralSettings",
    "NavigatorSettings",
    "UiDispatcher",
    "DispatchThreadError",
    "Signal",
    "setup_logging",
    "Alarm",
    "CoalescingLookupQueue",
    "LookupHandle",
    "Plugin",
    "PluginState",
    "PluginManager",
]
