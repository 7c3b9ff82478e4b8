"""
Project Navigator - one project's set of navigator panes.

Composes the pane registry, the tabs (content binding), the auto-scroll
controller, persistence and the view options, and exposes the calls an
editor host makes.
"""
from typing import Any, Dict, List, Optional

from loguru import logger

from paneview.core.base_system import BaseSystem
from paneview.core.config import ConfigManager
from paneview.core.dispatch import UiDispatcher
from .content import ContentBinding, _ContentSignals
from .editors import EditorManager
from .feed import PaneFeed
from .options import ViewOptions
from .pane import NavigatorPane
from .persistence import StatePersistence
from .registry import PaneRegistry
from .state import ViewSettingsStore, default_settings_store
from .sync import SelectionSyncController


class ProjectNavigator(BaseSystem):
    """
    Navigator session for one project.

    Usage:
        navigator = ProjectNavigator(config, feed, editors)
        navigator.load_from_file()
        async with navigator:
            navigator.signals.pane_changed.connect(on_pane_changed)
            navigator.change_view("Project")
            navigator.options.set_for_pane("flatten_packages", "Project", True)
            navigator.save_to_file()

    Everything except `register`-style feed traffic runs on the dispatch
    thread of the loop the navigator was initialized in.
    """

    def __init__(self,
                 config: ConfigManager,
                 feed: PaneFeed,
                 editors: EditorManager,
                 settings_store: Optional[ViewSettingsStore] = None,
                 dispatcher: Optional[UiDispatcher] = None):
        super().__init__(config)
        self.feed = feed
        self.editors = editors
        self.settings_store = settings_store or default_settings_store()
        self.view_state = self.settings_store.new_project_state()
        self.dispatcher = dispatcher

        self.registry = PaneRegistry(self)
        self.content = ContentBinding(self)
        self.persistence = StatePersistence(self)
        self.options = ViewOptions(self)
        self.sync: Optional[SelectionSyncController] = None
        self._disposed = False

    # === Lifecycle ===

    async def initialize(self):
        if self.dispatcher is None:
            self.dispatcher = UiDispatcher.current()
        self.setup()
        await super().initialize()
        logger.info(f"ProjectNavigator initialized with panes {self.pane_ids()}")

    def setup(self) -> None:
        """Load panes from the feed, build the tabs and restore the saved view."""
        self.dispatcher.assert_dispatch_thread("navigator setup")
        self.sync = SelectionSyncController(self)
        self.sync.install()
        self.registry.ensure_loaded()
        self.registry.start()
        self.registry.subscribe(self.feed)
        self.content.selected_slot_changed()

    async def shutdown(self):
        if self._disposed:
            return
        self._disposed = True
        self.registry.unsubscribe(self.feed)
        if self.sync is not None:
            await self.sync.shutdown()
        self.registry.dispose()
        self.content.dispose()
        await super().shutdown()
        logger.info("ProjectNavigator shutdown")

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def signals(self) -> _ContentSignals:
        """Qt signals: pane_changed(old view id, new view id)."""
        return self.content.signals

    # === Views ===

    @property
    def current_view_id(self) -> Optional[str]:
        return self.content.state.view_id

    @property
    def current_sub_id(self) -> Optional[str]:
        return self.content.state.sub_id

    @property
    def current_pane(self) -> Optional[NavigatorPane]:
        return self.registry.live_pane(self.current_view_id)

    def pane_ids(self) -> List[str]:
        return self.registry.ids()

    def get_pane(self, pane_id: str) -> Optional[NavigatorPane]:
        return self.registry.get(pane_id)

    @property
    def default_view_id(self) -> Optional[str]:
        """First contributed pane claiming to be the default, else the configured one."""
        for pane in self.feed.extensions():
            if pane.is_default_pane():
                return pane.id
        return self.config.data.navigator.default_view_id

    def change_view(self, view_id: str, sub_id: Optional[str] = None) -> bool:
        return self.content.change_view(view_id, sub_id)

    def select(self, element: Any, locator: Any = None, request_focus: bool = False) -> bool:
        """Select element in the current pane (unless the request is obsolete)."""
        if self.sync is None:
            return False
        return self.sync.select(element, locator, request_focus)

    def tool_window_shown(self) -> None:
        if self.sync is not None:
            self.sync.tool_window_shown()

    def refresh(self) -> None:
        pane = self.current_pane
        if pane is not None:
            pane.update_from_root()

    def update_panes(self, with_comparator: bool) -> None:
        """Refresh every pane, keeping the current pane's selection."""
        current = self.current_pane
        selected = current.get_selected_elements() if current is not None else []
        for pane in self.registry.live_panes():
            if with_comparator:
                pane.install_comparator()
            pane.update_from_root()
        if current is not None and selected:
            element = selected[0]
            if self.sync is not None:
                self.sync.reselect(current, element, current.source_for(element))
            else:
                current.select(element, current.source_for(element), False)

    # === Auto-scroll ===

    def is_autoscroll_from_source(self, pane_id: Optional[str]) -> bool:
        if not self.options.is_active("autoscroll_from_source", pane_id):
            return False
        pane = self.registry.live_pane(pane_id)
        return pane is not None and pane.is_showing()

    def is_autoscroll_to_source(self, pane_id: Optional[str]) -> bool:
        if not self.options.is_active("autoscroll_to_source", pane_id):
            return False
        return self.registry.live_pane(pane_id) is not None

    # === Persistence ===

    def get_state(self) -> Dict[str, Any]:
        return self.persistence.save()

    def load_state(self, blob: Dict[str, Any]) -> None:
        self.persistence.load(blob)

    def save_to_file(self, path: Optional[str] = None) -> bool:
        return self.persistence.save_to_file(path or self.config.data.navigator.state_file)

    def load_from_file(self, path: Optional[str] = None) -> bool:
        return self.persistence.load_from_file(path or self.config.data.navigator.state_file)

    def __repr__(self) -> str:
        return f"ProjectNavigator(view={self.current_view_id!r}, panes={self.pane_ids()})"
