import pytest
from loguru import logger
from PySide6.QtCore import QCoreApplication

from paneview.core.config import ConfigManager
from paneview.ui.navigator import (
    EditorManager,
    NavigatorPane,
    PaneFeed,
    ProjectNavigator,
    ViewSettingsStore,
)


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Qt signal holders need a core application."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def log_records():
    """Loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record),
                            level="DEBUG", format="{message}")
    yield records
    logger.remove(handler_id)


class FakePane(NavigatorPane):
    """Pane recording what the navigator asks of it."""

    def __init__(self, pane_id, weight, sub_ids=(), title=None, capabilities=(),
                 initially_visible=True, default=False, focused=False):
        self.id = pane_id
        self.weight = weight
        self.sub_ids = tuple(sub_ids)
        self.title = title or pane_id
        self.capabilities = frozenset(capabilities)
        self.is_initially_visible = initially_visible
        self._default = default
        self._focused = focused
        super().__init__()
        self.select_calls = []
        self.updates = 0
        self.comparators = 0

    def is_default_pane(self):
        return self._default

    def has_focus(self):
        return self._focused

    def select(self, element, locator, request_focus):
        self.select_calls.append((element, locator, request_focus))
        super().select(element, locator, request_focus)

    def update_from_root(self):
        self.updates += 1

    def install_comparator(self):
        self.comparators += 1


@pytest.fixture
def make_pane():
    return FakePane


@pytest.fixture
def make_navigator():
    """Factory for an uninitialized navigator with short auto-scroll delays."""
    def factory(*panes, store=None, **settings):
        config = ConfigManager(None)
        config.data.navigator.autoscroll_delay_ms = 10
        for key, value in settings.items():
            setattr(config.data.navigator, key, value)
        return ProjectNavigator(config, PaneFeed(panes), EditorManager(),
                                settings_store=store or ViewSettingsStore())
    return factory
