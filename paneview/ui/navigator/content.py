"""
Content Binding - tabs of the navigator and the active view.

Each pane contributes one slot per declared sub-view (or a single slot
when it declares none). Slots are kept in ascending pane weight, grouped
by pane, with a separator label at group boundaries.

SelectionState only changes in `selected_slot_changed()`.
"""
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional

from PySide6.QtCore import QObject, Signal
from loguru import logger

from .errors import PaneWeightCollisionError
from .pane import NavigatorPane
from .selection import SelectionState

if TYPE_CHECKING:
    from .navigator import ProjectNavigator


@dataclass
class ContentSlot:
    """
    One tab.

    Attributes:
        pane_id: Owning pane
        sub_id: Sub-view shown by the tab, None for panes without sub-views
        title: Tab caption
        separator: Group label shown before the tab ("" for a plain line)
    """
    pane_id: str
    sub_id: Optional[str]
    title: str
    separator: Optional[str] = None
    pane: Optional[NavigatorPane] = field(default=None, compare=False, repr=False)


class _ContentSignals(QObject):
    """Signal holder to avoid metaclass conflict."""
    pane_changed = Signal(object, object)  # old view id, new view id


class ContentBinding:
    """
    Maps (pane id, sub id) pairs to ordered slots and tracks the selected one.

    Usage:
        content.add_pane(pane)
        content.signals.pane_changed.connect(on_pane_changed)
        content.set_selected_slot(content.find_slot("Project", None))
    """

    def __init__(self, navigator: 'ProjectNavigator'):
        self._navigator = navigator
        self._slots: List[ContentSlot] = []
        self._selected: Optional[ContentSlot] = None
        self._state = SelectionState()
        self._signals = _ContentSignals()

    @property
    def signals(self) -> _ContentSignals:
        return self._signals

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def slots(self) -> List[ContentSlot]:
        return list(self._slots)

    @property
    def selected_slot(self) -> Optional[ContentSlot]:
        return self._selected

    # === Slots ===

    def add_pane(self, pane: NavigatorPane) -> None:
        """
        Insert the pane's slots at its weight position.

        Raises:
            PaneWeightCollisionError: another pane has the same weight
        """
        self._navigator.dispatcher.assert_dispatch_thread("add pane")
        index = 0
        for i, slot in enumerate(self._slots):
            other = slot.pane
            if other is pane:
                logger.debug(f"Pane already has slots: {pane.id}")
                return
            if other.weight == pane.weight:
                raise PaneWeightCollisionError(
                    f"Panes {other.id!r} and {pane.id!r} have the same weight {pane.weight}"
                )
            if other.weight > pane.weight:
                index = i
                break
            index = i + 1

        if pane.sub_ids:
            new_slots = [
                ContentSlot(pane.id, sub_id, pane.presentable_sub_id_name(sub_id),
                            pane.title if i == 0 else None, pane)
                for i, sub_id in enumerate(pane.sub_ids)
            ]
        else:
            new_slots = [ContentSlot(pane.id, None, pane.title, None, pane)]
        self._slots[index:index] = new_slots

    def remove_pane(self, pane_id: str) -> None:
        """Drop every slot of pane_id. A removed selection moves to the nearest slot."""
        self._navigator.dispatcher.assert_dispatch_thread("remove pane")
        if not any(s.pane_id == pane_id for s in self._slots):
            return
        selected = self._selected
        if selected is not None and selected.pane_id == pane_id:
            position = self._slots.index(selected)
            following = [s for s in self._slots[position:] if s.pane_id != pane_id]
            preceding = [s for s in self._slots[:position] if s.pane_id != pane_id]
            if following:
                self._selected = following[0]
            elif preceding:
                self._selected = preceding[-1]
            else:
                self._selected = None
        self._slots = [s for s in self._slots if s.pane_id != pane_id]
        self.fix_separators()

    def fix_separators(self) -> None:
        """
        Recompute group labels: a pane with sub-views is headed by its
        title, and a pane following such a group gets a plain separator.
        """
        previous: Optional[ContentSlot] = None
        for slot in self._slots:
            first_of_pane = previous is None or previous.pane_id != slot.pane_id
            if first_of_pane and slot.sub_id is not None:
                slot.separator = slot.pane.title if slot.pane is not None else ""
            elif first_of_pane and previous is not None and previous.sub_id is not None:
                slot.separator = ""
            else:
                slot.separator = None
            previous = slot

    def find_slot(self, view_id: Optional[str], sub_id: Optional[str]) -> Optional[ContentSlot]:
        """Slot matching (view_id, sub_id) exactly."""
        for slot in self._slots:
            if slot.pane_id == view_id and slot.sub_id == sub_id:
                return slot
        return None

    def first_slot_of(self, view_id: str) -> Optional[ContentSlot]:
        for slot in self._slots:
            if slot.pane_id == view_id:
                return slot
        return None

    # === Selection ===

    def set_selected_slot(self, slot: Optional[ContentSlot]) -> None:
        """Select a tab, as a user click would."""
        self._navigator.dispatcher.assert_dispatch_thread("select tab")
        if slot is not None and slot not in self._slots:
            logger.warning(f"Ignoring selection of a slot not in the navigator: {slot}")
            return
        self._selected = slot
        self.selected_slot_changed()

    def selected_slot_changed(self) -> None:
        """
        Bring SelectionState in line with the selected slot.

        No-op when they already match; a slot whose pane is not live is
        rejected.
        """
        navigator = self._navigator
        navigator.dispatcher.assert_dispatch_thread("change view")
        slot = self._selected
        if slot is None:
            if not self._state.is_empty:
                self._transition(SelectionState())
                if navigator.sync is not None:
                    navigator.sync.on_pane_shown(None)
            return

        new_pane = navigator.registry.live_pane(slot.pane_id)
        if new_pane is None:
            logger.warning(f"Rejected selection of unknown pane: {slot.pane_id}")
            return
        if self._state.matches(slot.pane_id, slot.sub_id):
            return

        if slot.sub_id is not None and slot.sub_id != new_pane.sub_id:
            new_pane.sub_id = slot.sub_id
        self._show_pane(new_pane, slot)

        if navigator.is_autoscroll_from_source(new_pane.id) and navigator.sync is not None:
            navigator.sync.scroll_from_source(False)

    def change_view(self, view_id: str, sub_id: Optional[str] = None) -> bool:
        """
        Switch to a pane (and sub-view).

        Returns:
            True if the active view changed
        """
        self._navigator.dispatcher.assert_dispatch_thread("change view")
        pane = self._navigator.registry.live_pane(view_id)
        if pane is None:
            logger.warning(f"Rejected change to unknown view: {view_id}")
            return False
        if pane.sub_ids:
            if sub_id is None:
                sub_id = pane.sub_id
        elif sub_id is not None:
            logger.error(f"View {view_id} has no sub-views, ignoring sub id {sub_id}")
            sub_id = None

        if self._state.matches(view_id, sub_id):
            return False
        slot = self.find_slot(view_id, sub_id)
        if slot is None:
            logger.warning(f"No tab for view {view_id}/{sub_id}")
            return False
        self.set_selected_slot(slot)
        return self._state.matches(view_id, sub_id)

    def _show_pane(self, new_pane: NavigatorPane, slot: ContentSlot) -> None:
        navigator = self._navigator
        old_pane = navigator.registry.live_pane(self._state.view_id)

        element: Any = None
        locator: Any = None
        # Same pane counts too: a sub-view switch carries the selection over
        if old_pane is not None:
            selected = old_pane.get_selected_elements()
            if selected:
                element = selected[0]
                locator = old_pane.source_for(element)

        old_state = self._state
        self._transition(SelectionState(slot.pane_id, slot.sub_id), announce=False)

        if (element is not None and new_pane.sub_id is not None
                and new_pane.is_sub_id_selectable(new_pane.sub_id, element)):
            if navigator.sync is not None:
                navigator.sync.reselect(new_pane, element, locator)
            else:
                new_pane.select(element, locator, False)

        if navigator.sync is not None:
            navigator.sync.on_pane_shown(new_pane)
        self._announce(old_state)

    def _transition(self, state: SelectionState, announce: bool = True) -> None:
        old_state = self._state
        self._state = state
        if announce:
            self._announce(old_state)

    def _announce(self, old_state: SelectionState) -> None:
        logger.info(f"View changed: {old_state.view_id}/{old_state.sub_id} -> "
                    f"{self._state.view_id}/{self._state.sub_id}")
        if old_state.view_id != self._state.view_id:
            self._signals.pane_changed.emit(old_state.view_id, self._state.view_id)

    def dispose(self) -> None:
        self._slots = []
        self._selected = None
        self._state = SelectionState()
