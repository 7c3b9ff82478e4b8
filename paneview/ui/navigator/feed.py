"""
Pane Feed - the extension list panes are contributed through.

Plugins add and remove panes here; the navigator's registry subscribes
once and reloads from `extensions()` on every notification.
"""
import threading
from typing import List, Sequence

from loguru import logger

from paneview.core.events import Signal
from paneview.core.plugins import Plugin
from .pane import NavigatorPane


class PaneFeed:
    """
    Ordered, thread-safe list of contributed panes.

    Signals:
        pane_added(pane): A pane was contributed
        pane_removed(pane): A pane was withdrawn

    Notifications may come from plugin-loader threads; listeners must
    hand UI work back to the dispatcher.
    """

    def __init__(self, panes: Sequence[NavigatorPane] = ()):
        self._lock = threading.Lock()
        self._panes: List[NavigatorPane] = list(panes)
        self.pane_added = Signal("feed.pane_added")
        self.pane_removed = Signal("feed.pane_removed")

    def extensions(self) -> List[NavigatorPane]:
        """Snapshot of contributed panes in contribution order."""
        with self._lock:
            return list(self._panes)

    def add(self, pane: NavigatorPane) -> None:
        with self._lock:
            if any(p is pane for p in self._panes):
                logger.debug(f"Pane already contributed: {pane!r}")
                return
            self._panes.append(pane)
        self.pane_added.emit(pane)

    def remove(self, pane: NavigatorPane) -> None:
        with self._lock:
            self._panes = [p for p in self._panes if p is not pane]
        self.pane_removed.emit(pane)


class PanePlugin(Plugin):
    """
    Plugin contributing navigator panes.

    Loaded with a PaneFeed as context. Panes are created fresh on each
    start, so a hot reload replaces pane instances.

    Usage:
        class ScopePanes(PanePlugin):
            def create_panes(self):
                return [ScopePane()]
    """

    def __init__(self, name=None):
        super().__init__(name)
        self._contributed: List[NavigatorPane] = []

    def create_panes(self) -> List[NavigatorPane]:
        return []

    @property
    def panes(self) -> List[NavigatorPane]:
        return list(self._contributed)

    def on_start(self) -> None:
        feed: PaneFeed = self.context
        self._contributed = list(self.create_panes())
        for pane in self._contributed:
            feed.add(pane)

    def on_stop(self) -> None:
        feed: PaneFeed = self.context
        for pane in self._contributed:
            feed.remove(pane)
        self._contributed = []
