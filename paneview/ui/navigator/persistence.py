"""
State Persistence - save and restore the navigator across sessions.

State tree:
    {
        "navigator": {"currentView": "Project", "currentSubView": ..., "proportions": [0.3]},
        "panes": [{"id": "Project", "state": {...}}, ...],
        "options": {"flatten_packages": true, ...}
    }

Fragments for panes that are not registered yet are kept aside and
handed to the pane when it shows up (and written back unchanged on save).
"""
import json
import os
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .pane import NavigatorPane

if TYPE_CHECKING:
    from .navigator import ProjectNavigator


class NavigatorElement(BaseModel):
    """The "navigator" node."""
    model_config = ConfigDict(populate_by_name=True)

    current_view: Optional[str] = Field(default=None, alias="currentView")
    current_sub_view: Optional[str] = Field(default=None, alias="currentSubView")
    proportions: List[float] = Field(default_factory=list)


class PaneElement(BaseModel):
    """One child of the "panes" node."""
    id: str
    state: Dict[str, Any] = Field(default_factory=dict)


class StatePersistence:
    """
    Reads and writes the navigator state tree.

    Attributes:
        saved_pane_id / saved_sub_id: View to select once its tab exists
        proportions: Layout proportions, passed through untouched
    """

    def __init__(self, navigator: 'ProjectNavigator'):
        self._navigator = navigator
        self.saved_pane_id: Optional[str] = None
        self.saved_sub_id: Optional[str] = None
        self.proportions: List[float] = []
        self._lock = threading.Lock()
        self._buffered: Dict[str, Dict[str, Any]] = {}

    # === Buffered fragments ===

    def buffered_ids(self) -> List[str]:
        with self._lock:
            return list(self._buffered)

    def take_buffered(self, pane_id: str) -> Optional[Dict[str, Any]]:
        """Remove and return the fragment waiting for pane_id."""
        with self._lock:
            return self._buffered.pop(pane_id, None)

    def apply_pane_state(self, pane: NavigatorPane, fragment: Dict[str, Any]) -> bool:
        try:
            pane.load_state(fragment)
        except Exception as e:
            logger.warning(f"Ignoring unreadable state of pane {pane.id}: {e}")
            return False
        return True

    # === Tree ===

    def save(self) -> Dict[str, Any]:
        """
        Build the state tree.

        A pane whose save_state fails, or returns something that cannot be
        written as JSON, is left out; the others are written.
        """
        navigator = self._navigator
        if navigator.current_view_id is not None:
            view_id, sub_id = navigator.current_view_id, navigator.current_sub_id
        else:
            view_id, sub_id = self.saved_pane_id, self.saved_sub_id
        node = NavigatorElement(current_view=view_id, current_sub_view=sub_id,
                                proportions=list(self.proportions))

        panes: List[Dict[str, Any]] = []
        live_ids = set()
        for pane in navigator.registry.live_panes():
            live_ids.add(pane.id)
            try:
                element = PaneElement(id=pane.id, state=pane.save_state())
                json.dumps(element.state)
            except Exception as e:
                logger.warning(f"Failed to save state of pane {pane.id}: {e}")
                continue
            panes.append(element.model_dump())

        with self._lock:
            buffered = dict(self._buffered)
        for pane_id, fragment in buffered.items():
            if pane_id not in live_ids:
                panes.append(PaneElement(id=pane_id, state=fragment).model_dump())

        return {
            "navigator": node.model_dump(by_alias=True, exclude_none=True),
            "panes": panes,
            "options": navigator.options.snapshot(),
        }

    def load(self, blob: Dict[str, Any]) -> None:
        """
        Read a state tree.

        Fragments go straight to known panes and are buffered for the
        rest. A malformed pane element is skipped; the rest still loads.
        """
        if not isinstance(blob, dict):
            logger.warning(f"Ignoring navigator state of type {type(blob).__name__}")
            return
        navigator = self._navigator

        try:
            node = NavigatorElement.model_validate(blob.get("navigator") or {})
        except ValidationError as e:
            logger.warning(f"Malformed navigator node, using defaults: {e}")
            node = NavigatorElement()
        self.saved_pane_id = node.current_view
        self.saved_sub_id = node.current_sub_view
        self.proportions = node.proportions

        options = blob.get("options")
        if isinstance(options, dict):
            navigator.options.apply(options)

        raw_panes = blob.get("panes") or []
        if not isinstance(raw_panes, list):
            logger.warning("Malformed panes node, ignoring pane states")
            raw_panes = []
        for raw in raw_panes:
            try:
                element = PaneElement.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed pane state: {e}")
                continue
            pane = navigator.registry.get(element.id)
            if pane is not None:
                self.apply_pane_state(pane, element.state)
            else:
                with self._lock:
                    self._buffered[element.id] = element.state
        logger.debug(f"Navigator state loaded (view={self.saved_pane_id}, panes={len(raw_panes)})")

    # === Selection ===

    def restore_selection(self) -> None:
        """
        Select the saved view once its tab exists (then forget it);
        otherwise make sure some tab is selected.
        """
        navigator = self._navigator
        content = navigator.content

        if self.saved_pane_id is not None:
            slot = content.find_slot(self.saved_pane_id, self.saved_sub_id)
            if slot is not None:
                content.set_selected_slot(slot)
                self.saved_pane_id = None
                self.saved_sub_id = None
                return
        elif content.selected_slot is None:
            default_id = navigator.default_view_id
            slot = content.first_slot_of(default_id) if default_id is not None else None
            if slot is not None:
                content.set_selected_slot(slot)
                return

        if content.selected_slot is None and content.slots:
            content.set_selected_slot(content.slots[0])

    # === Files ===

    def save_to_file(self, path: str) -> bool:
        """Write the tree to path. The previous file survives a failed write."""
        temp_path = f"{path}.tmp"
        try:
            text = json.dumps(self.save(), indent=2)
            dirname = os.path.dirname(path)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(temp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save navigator state to {path}: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            return False
        logger.debug(f"Navigator state saved to {path}")
        return True

    def load_from_file(self, path: str) -> bool:
        if not os.path.isfile(path):
            logger.debug(f"No navigator state at {path}")
            return False
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read navigator state from {path}: {e}")
            return False
        self.load(raw)
        return True
