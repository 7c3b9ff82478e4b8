"""
Navigator pane contract.

A pane is one pluggable structural view (project tree, file system,
scopes...) contributing one tab per sub-view to the shared navigator.
"""
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Protocol, Sequence, runtime_checkable

from loguru import logger

from paneview.core.events import Signal


class Capability(Enum):
    """Pane features that gate view options."""
    ABBREVIATE_PACKAGE_NAMES = "abbreviate_package_names"
    COMPACT_DIRECTORIES = "compact_directories"
    FLATTEN_MODULES = "flatten_modules"
    FLATTEN_PACKAGES = "flatten_packages"
    FOLDERS_ALWAYS_ON_TOP = "folders_always_on_top"
    HIDE_EMPTY_MIDDLE_PACKAGES = "hide_empty_middle_packages"
    MANUAL_ORDER = "manual_order"
    SHOW_EXCLUDED_FILES = "show_excluded_files"
    SHOW_LIBRARY_CONTENTS = "show_library_contents"
    SHOW_MODULES = "show_modules"
    SORT_BY_TYPE = "sort_by_type"
    FILE_NESTING = "file_nesting"


@runtime_checkable
class PaneProtocol(Protocol):
    """
    Structural form of the pane contract.

    Any object with these members can be registered, NavigatorPane is
    just the convenient base.
    """
    id: str
    weight: int
    sub_ids: Sequence[str]

    def supports(self, capability: Capability) -> bool:
        ...

    def select(self, element: Any, locator: Any, request_focus: bool) -> None:
        ...

    def get_selected_elements(self) -> List[Any]:
        ...

    def save_state(self) -> Dict[str, Any]:
        ...

    def load_state(self, fragment: Dict[str, Any]) -> None:
        ...


class NavigatorPane:
    """
    Base class for navigator panes.

    Subclasses set `id`, `weight` and `title` (class attributes or in
    __init__) and override whatever they support. Weights must be
    distinct across panes; the navigator orders tabs by ascending weight.

    Attributes:
        id: Unique pane identifier
        weight: Ordering key
        title: Display name, also the separator label of a sub-view group
        sub_ids: Declared sub-views, in tab order
        capabilities: Features gating view options
        is_initially_visible: Added automatically when the feed offers it
    """

    id: str = ""
    weight: int = 0
    title: str = ""
    sub_ids: Sequence[str] = ()
    capabilities: FrozenSet[Capability] = frozenset()
    is_initially_visible: bool = True

    def __init__(self):
        self._sub_id: Optional[str] = self.sub_ids[0] if self.sub_ids else None
        self._selected: List[Any] = []
        self._disposed = False
        self.selection_changed = Signal(f"{self.id or type(self).__name__}.selection_changed")

    # === Identity / sub-views ===

    @property
    def sub_id(self) -> Optional[str]:
        """Currently shown sub-view."""
        return self._sub_id

    @sub_id.setter
    def sub_id(self, value: Optional[str]) -> None:
        self._sub_id = value

    def presentable_sub_id_name(self, sub_id: str) -> str:
        return sub_id

    def is_default_pane(self) -> bool:
        return False

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    # === Presentation state ===

    def is_showing(self) -> bool:
        return not self._disposed

    def has_focus(self) -> bool:
        return False

    def is_sub_id_selectable(self, sub_id: str, element: Any) -> bool:
        """Can element be shown under sub_id (used when switching views)."""
        return True

    # === Selection ===

    def select(self, element: Any, locator: Any, request_focus: bool) -> None:
        """Select the node for element. locator is its source file, if known."""
        self._selected = [element]
        self.fire_selection_changed()

    def get_selected_elements(self) -> List[Any]:
        return list(self._selected)

    def fire_selection_changed(self) -> None:
        """Notify listeners (auto-scroll-to-source) of a user selection."""
        self.selection_changed.emit(self)

    def source_for(self, element: Any) -> Any:
        """Source file to open for element, None if it has none."""
        return getattr(element, "file", None)

    # === Refresh ===

    def update_from_root(self) -> None:
        pass

    def install_comparator(self) -> None:
        pass

    # === Persistence ===

    def save_state(self) -> Dict[str, Any]:
        """Opaque per-pane fragment. Raise PaneStateWriteError to be skipped."""
        state: Dict[str, Any] = {}
        if self._sub_id is not None:
            state["subId"] = self._sub_id
        return state

    def load_state(self, fragment: Dict[str, Any]) -> None:
        """Apply a persisted fragment. Raise InvalidPaneStateError if unreadable."""
        sub_id = fragment.get("subId")
        if sub_id in self.sub_ids:
            self._sub_id = sub_id

    # === Lifecycle ===

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.selection_changed.clear()
        logger.debug(f"Pane disposed: {self.id}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, weight={self.weight})"
