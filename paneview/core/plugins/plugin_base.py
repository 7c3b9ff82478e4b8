"""
Plugin base class and lifecycle states.
"""
from abc import ABC
from enum import Enum
from typing import Any, Callable, Optional

from loguru import logger


class PluginState(Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    ENABLED = "enabled"
    STARTED = "started"


class Plugin(ABC):
    """
    Unit of contributed functionality with a four-state lifecycle:

        UNLOADED -load-> LOADED -enable-> ENABLED -start-> STARTED
        and back again with stop, disable, unload.

    Each step runs the matching `on_*` hook. A step requested from the
    wrong state is refused (returns False); a hook that raises is logged
    and leaves the state unchanged.

    The host shares one context object with its plugins at load time.
    Pane plugins receive the PaneFeed.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or type(self).__name__
        self.version = "1.0.0"
        self.description = ""
        self._state = PluginState.UNLOADED
        self._context: Any = None

    @property
    def state(self) -> PluginState:
        return self._state

    @property
    def context(self) -> Any:
        return self._context

    def _step(self, action: str, source: PluginState, target: PluginState,
              hook: Callable[[], None]) -> bool:
        if self._state is not source:
            logger.debug(f"Plugin {self.name}: cannot {action} while {self._state.value}")
            return False
        try:
            hook()
        except Exception as e:
            logger.error(f"Plugin {self.name}: {action} failed: {e}")
            return False
        self._state = target
        logger.debug(f"Plugin {self.name}: {action} -> {target.value}")
        return True

    def load(self, context: Any) -> bool:
        if self._state is PluginState.UNLOADED:
            self._context = context
        if self._step("load", PluginState.UNLOADED, PluginState.LOADED, self.on_load):
            logger.info(f"Plugin loaded: {self.name}")
            return True
        if self._state is PluginState.UNLOADED:
            self._context = None
        return False

    def unload(self) -> bool:
        if not self._step("unload", PluginState.LOADED, PluginState.UNLOADED, self.on_unload):
            return False
        self._context = None
        logger.info(f"Plugin unloaded: {self.name}")
        return True

    def enable(self) -> bool:
        return self._step("enable", PluginState.LOADED, PluginState.ENABLED, self.on_enable)

    def disable(self) -> bool:
        return self._step("disable", PluginState.ENABLED, PluginState.LOADED, self.on_disable)

    def start(self) -> bool:
        return self._step("start", PluginState.ENABLED, PluginState.STARTED, self.on_start)

    def stop(self) -> bool:
        return self._step("stop", PluginState.STARTED, PluginState.ENABLED, self.on_stop)

    # --- hooks ---

    def on_load(self) -> None:
        pass

    def on_unload(self) -> None:
        pass

    def on_enable(self) -> None:
        pass

    def on_disable(self) -> None:
        pass

    def on_start(self) -> None:
        pass

    def on_stop(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} {self._state.value}>"
