"""
Pane Registry - the set of live navigator panes.

Panes arrive through `register()` (from any thread) into a pending
buffer and are promoted into tabs on the dispatch thread. `reload()`
re-reads the feed and diffs it against what is registered.

The lock guards only the registry's own maps; pane callbacks and tab
updates always run with it released.
"""
import threading
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .errors import PaneWeightCollisionError
from .pane import NavigatorPane

if TYPE_CHECKING:
    from .navigator import ProjectNavigator


def collect_panes(extensions: Sequence[NavigatorPane]) -> Tuple[Dict[str, NavigatorPane], List[NavigatorPane]]:
    """
    Resolve contributed panes to one pane per id.

    The first contribution of an id wins; the result is ordered by weight.

    Returns:
        (panes by id, dropped duplicates)
    """
    chosen: Dict[str, NavigatorPane] = {}
    dropped: List[NavigatorPane] = []
    for pane in extensions:
        if pane.id in chosen:
            if chosen[pane.id] is not pane:
                dropped.append(pane)
            continue
        chosen[pane.id] = pane
    ordered = sorted(chosen.values(), key=lambda p: p.weight)
    return {p.id: p for p in ordered}, dropped


def diff_panes(old: Iterable[NavigatorPane],
               new: Dict[str, NavigatorPane]) -> Tuple[List[NavigatorPane], List[NavigatorPane]]:
    """
    Compare registered panes with the freshly collected set by identity.

    Returns:
        (panes to dispose, initially-visible panes to add)
    """
    removed: List[NavigatorPane] = []
    kept = set()
    for pane in old:
        if new.get(pane.id) is pane:
            kept.add(id(pane))
        else:
            removed.append(pane)
    added = [p for p in new.values() if id(p) not in kept and p.is_initially_visible]
    return removed, added


class PaneRegistry:
    """
    Live panes keyed by id, plus the not-yet-promoted buffer.

    Usage:
        registry.register(pane)       # any thread
        registry.unregister("Scope")  # dispatch thread
        registry.reload()             # after the feed changed
    """

    def __init__(self, navigator: 'ProjectNavigator'):
        self._navigator = navigator
        self._lock = threading.Lock()
        self._live: Dict[str, NavigatorPane] = {}
        self._pending: List[NavigatorPane] = []
        self._running = False
        self._extensions_loaded = False
        self._disposed = False

    # === Queries ===

    @property
    def is_running(self) -> bool:
        return self._running

    def live_pane(self, pane_id: Optional[str]) -> Optional[NavigatorPane]:
        if pane_id is None:
            return None
        with self._lock:
            return self._live.get(pane_id)

    def get(self, pane_id: Optional[str]) -> Optional[NavigatorPane]:
        """Live pane with pane_id, else a pending one."""
        if pane_id is None:
            return None
        with self._lock:
            pane = self._live.get(pane_id)
            if pane is not None:
                return pane
            for candidate in self._pending:
                if candidate.id == pane_id:
                    return candidate
        return None

    def live_panes(self) -> List[NavigatorPane]:
        """Live panes by ascending weight."""
        with self._lock:
            return sorted(self._live.values(), key=lambda p: p.weight)

    def pending_panes(self) -> List[NavigatorPane]:
        with self._lock:
            return list(self._pending)

    def ids(self) -> List[str]:
        return [p.id for p in self.live_panes()]

    def __contains__(self, pane_id: str) -> bool:
        with self._lock:
            return pane_id in self._live

    def __len__(self) -> int:
        with self._lock:
            return len(self._live)

    # === Registration ===

    def register(self, pane: NavigatorPane) -> None:
        """
        Buffer a pane; once running, promote it on the dispatch thread.

        Safe to call from any thread. A state fragment buffered by `load()`
        is not applied here: only panes arriving through the feed pick up
        their saved fragment. Apply one explicitly with
        `persistence.take_buffered` and `persistence.apply_pane_state`.
        """
        with self._lock:
            if self._disposed:
                return
            if not any(p is pane for p in self._pending):
                self._pending.append(pane)
            running = self._running
        logger.debug(f"Pane queued: {pane!r}")
        if running:
            self._navigator.dispatcher.invoke(self.promote_pending)

    def start(self) -> None:
        """Begin promoting; promotes whatever is buffered now."""
        self._navigator.dispatcher.assert_dispatch_thread("start registry")
        with self._lock:
            self._running = True
        self.promote_pending()

    def promote_pending(self) -> None:
        """
        Turn buffered panes into tabs, then restore the saved selection.

        Within one batch the first pane registered under an id wins; later
        ones are dropped with a warning. A weight collision (inside the
        batch or with a live pane) raises PaneWeightCollisionError and
        leaves the whole batch pending, with no tab added.
        """
        navigator = self._navigator
        navigator.dispatcher.assert_dispatch_thread("promote panes")

        accepted: List[NavigatorPane] = []
        dropped: List[Tuple[NavigatorPane, NavigatorPane]] = []
        with self._lock:
            if self._disposed:
                return
            seen: Dict[str, NavigatorPane] = {}
            for pane in self._pending:
                live = self._live.get(pane.id)
                if live is pane:
                    continue
                first = seen.get(pane.id) or live
                if first is not None:
                    dropped.append((pane, first))
                    continue
                seen[pane.id] = pane
                accepted.append(pane)
            accepted.sort(key=lambda p: p.weight)
            collision = self._weight_collision(accepted)
            if collision is None:
                self._pending = []

        if collision is not None:
            kept, rejected = collision
            logger.error(f"Pane {rejected.id} collides with {kept.id} at weight {rejected.weight}, "
                         f"{len(accepted)} pane(s) left pending")
            raise PaneWeightCollisionError(
                f"Panes {kept.id!r} and {rejected.id!r} have the same weight {rejected.weight}"
            )

        for pane, kept in dropped:
            logger.warning(f"Ignoring duplicated pane with id={pane.id}: keeping {kept!r}, dropping {pane!r}")

        for pane in accepted:
            navigator.content.add_pane(pane)
            with self._lock:
                self._live[pane.id] = pane
            logger.info(f"Pane registered: {pane.id} (weight {pane.weight})")

        navigator.content.fix_separators()
        navigator.persistence.restore_selection()

    def _weight_collision(self, batch: List[NavigatorPane]
                          ) -> Optional[Tuple[NavigatorPane, NavigatorPane]]:
        """First (kept, rejected) pair sharing a weight; batch is weight-sorted. Lock held."""
        by_weight = {pane.weight: pane for pane in self._live.values()}
        for pane in batch:
            other = by_weight.get(pane.weight)
            if other is not None and other is not pane:
                return other, pane
            by_weight[pane.weight] = pane
        return None

    def unregister(self, pane_id: str) -> bool:
        """
        Remove a pane's tabs and forget it.

        Unknown ids are ignored (a pending pane with that id is dropped).

        Returns:
            True if a live pane was removed
        """
        navigator = self._navigator
        navigator.dispatcher.assert_dispatch_thread("unregister pane")
        with self._lock:
            self._pending = [p for p in self._pending if p.id != pane_id]
            pane = self._live.pop(pane_id, None)
        if pane is None:
            return False
        navigator.content.remove_pane(pane_id)
        logger.info(f"Pane removed: {pane_id}")
        navigator.content.selected_slot_changed()
        return True

    def _withdraw(self, pane: NavigatorPane) -> None:
        with self._lock:
            self._pending = [p for p in self._pending if p is not pane]
            is_live = self._live.get(pane.id) is pane
        if is_live:
            self.unregister(pane.id)

    # === Feed ===

    def _load_panes(self) -> Dict[str, NavigatorPane]:
        panes, dropped = collect_panes(self._navigator.feed.extensions())
        for pane in dropped:
            kept = panes[pane.id]
            logger.warning(f"Ignoring duplicated pane with id={pane.id}: keeping {kept!r}, dropping {pane!r}")
        persistence = self._navigator.persistence
        for pane in panes.values():
            fragment = persistence.take_buffered(pane.id)
            if fragment is not None:
                persistence.apply_pane_state(pane, fragment)
        return panes

    def ensure_loaded(self) -> None:
        """Register the feed's initially-visible panes, once."""
        with self._lock:
            if self._disposed or self._extensions_loaded:
                return
            self._extensions_loaded = True
        for pane in self._load_panes().values():
            if pane.is_initially_visible:
                self.register(pane)

    def reload(self) -> None:
        """
        Re-read the feed: dispose panes that vanished, add new visible ones.

        Safe to call repeatedly and from any thread; the UI part runs on
        the dispatch thread.
        """
        with self._lock:
            if self._disposed or not self._extensions_loaded:
                return
        new_panes = self._load_panes()
        with self._lock:
            if self._disposed:
                return
            old = list(self._pending) + list(self._live.values())
        removed, added = diff_panes(old, new_panes)
        if not removed and not added:
            return
        logger.debug(f"Reloading panes: -{len(removed)} +{len(added)}")
        self._navigator.dispatcher.invoke(self._apply_reload, removed, added)

    def _apply_reload(self, removed: List[NavigatorPane], added: List[NavigatorPane]) -> None:
        for pane in removed:
            self._withdraw(pane)
            pane.dispose()
        for pane in added:
            if not pane.is_disposed:
                self.register(pane)

    def subscribe(self, feed) -> None:
        feed.pane_added.connect(self._on_pane_added)
        feed.pane_removed.connect(self._on_pane_removed)

    def unsubscribe(self, feed) -> None:
        feed.pane_added.disconnect(self._on_pane_added)
        feed.pane_removed.disconnect(self._on_pane_removed)

    def _on_pane_added(self, pane: NavigatorPane) -> None:
        self.reload()

    def _on_pane_removed(self, pane: NavigatorPane) -> None:
        with self._lock:
            known = self._live.get(pane.id) is pane or any(p is pane for p in self._pending)
        if known:
            self.reload()
        else:
            pane.dispose()

    # === Lifecycle ===

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            self._running = False
            panes = list(self._pending) + list(self._live.values())
            self._pending = []
            self._live.clear()
        for pane in panes:
            pane.dispose()
