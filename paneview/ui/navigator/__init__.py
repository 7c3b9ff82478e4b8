"""
Navigator subsystem - pane registry, tabs, auto-scroll and persistence.
"""
from .content import ContentBinding, ContentSlot
from .editors import (
    EditorManager,
    FileEditor,
    OpenFileRequest,
    SourceDocument,
    SourceElement,
    SourceFile,
    TextEditor,
)
from .errors import (
    InvalidPaneStateError,
    NavigatorError,
    PaneStateWriteError,
    PaneWeightCollisionError,
)
from .feed import PaneFeed, PanePlugin
from .navigator import ProjectNavigator
from .options import OPTION_SPECS, Option, OptionSpec, RefreshMode, ViewOptions
from .pane import Capability, NavigatorPane, PaneProtocol
from .persistence import StatePersistence
from .registry import PaneRegistry, collect_panes, diff_panes
from .selection import Obsolescence, SelectionState
from .state import SharedViewSettings, ViewSettingsStore, ViewState, default_settings_store
from .sync import SelectionSyncController

__all__ = [
    "ProjectNavigator",
    "NavigatorPane",
    "PaneProtocol",
    "Capability",
    "PaneFeed",
    "PanePlugin",
    "PaneRegistry",
    "collect_panes",
    "diff_panes",
    "ContentBinding",
    "ContentSlot",
    "SelectionState",
    "Obsolescence",
    "SelectionSyncController",
    "StatePersistence",
    "Option",
    "OptionSpec",
    "OPTION_SPECS",
    "RefreshMode",
    "ViewOptions",
    "ViewState",
    "SharedViewSettings",
    "ViewSettingsStore",
    "default_settings_store",
    "EditorManager",
    "FileEditor",
    "TextEditor",
    "SourceFile",
    "SourceElement",
    "SourceDocument",
    "OpenFileRequest",
    "NavigatorError",
    "PaneWeightCollisionError",
    "InvalidPaneStateError",
    "PaneStateWriteError",
]
