"""
paneview - Pluggable navigator panes for a shared tool window.

Coordinates independently contributed navigator panes: registration as
plugins come and go, the single active pane/sub-view, two-way selection
sync with the source editors, and persistence of the chosen view.

Usage:
    from paneview import ProjectNavigator, PaneFeed, EditorManager
    from paneview.core import ConfigManager

    navigator = ProjectNavigator(ConfigManager(None), feed, editors)
    await navigator.initialize()
"""
from .ui.navigator import (
    ProjectNavigator,
    NavigatorPane,
    PaneFeed,
    PanePlugin,
    EditorManager,
)
from .bootstrap import start_navigator, stop_navigator

__version__ = "0.1.0"

__all__ = [
    "ProjectNavigator",
    "NavigatorPane",
    "PaneFeed",
    "PanePlugin",
    "EditorManager",
    "start_navigator",
    "stop_navigator",
]
