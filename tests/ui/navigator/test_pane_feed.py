"""
Tests for PaneFeed and pane contribution through plugins (hot reload).
"""
import pytest

from paneview.core.plugins import PluginManager
from paneview.ui.navigator import NavigatorPane, PaneFeed, PanePlugin, PaneProtocol


class ScopePane(NavigatorPane):
    id = "Scope"
    weight = 50
    title = "Scopes"
    sub_ids = ("All", "Tests")


class ScopePanes(PanePlugin):
    def create_panes(self):
        return [ScopePane()]


def test_feed_ignores_duplicate_add(make_pane):
    feed = PaneFeed()
    added = []
    feed.pane_added.connect(added.append)
    pane = make_pane("A", 10)

    feed.add(pane)
    feed.add(pane)

    assert feed.extensions() == [pane]
    assert added == [pane]


def test_feed_remove_unknown_still_notifies(make_pane):
    feed = PaneFeed()
    removed = []
    feed.pane_removed.connect(removed.append)
    pane = make_pane("A", 10)

    feed.remove(pane)

    assert removed == [pane]
    assert feed.extensions() == []


def test_pane_protocol():
    assert isinstance(ScopePane(), PaneProtocol)
    assert not isinstance(object(), PaneProtocol)


def test_pane_state_defaults():
    pane = ScopePane()
    assert pane.sub_id == "All"
    assert pane.save_state() == {"subId": "All"}
    pane.load_state({"subId": "Tests"})
    assert pane.sub_id == "Tests"
    pane.load_state({"subId": "Unknown"})
    assert pane.sub_id == "Tests"


@pytest.mark.asyncio
async def test_plugin_start_and_stop_drive_panes(make_navigator, make_pane):
    navigator = make_navigator(make_pane("Project", 10))
    await navigator.initialize()
    manager = PluginManager(navigator.feed)
    manager.load_plugin_class(ScopePanes)
    manager.enable_all()

    manager.start_all()
    assert navigator.pane_ids() == ["Project", "Scope"]
    assert [s.sub_id for s in navigator.content.slots if s.pane_id == "Scope"] == ["All", "Tests"]

    manager.stop_all()
    assert navigator.pane_ids() == ["Project"]
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_plugin_hot_reload_replaces_pane(make_navigator, make_pane):
    navigator = make_navigator(make_pane("Project", 10))
    await navigator.initialize()
    manager = PluginManager(navigator.feed)
    manager.load_plugin_class(ScopePanes)
    manager.enable_all()
    manager.start_all()
    navigator.change_view("Scope", "Tests")
    old = navigator.get_pane("Scope")

    assert manager.reload_plugin("ScopePanes")

    fresh = navigator.get_pane("Scope")
    assert fresh is not old
    assert old.is_disposed
    assert navigator.pane_ids() == ["Project", "Scope"]
    assert navigator.current_view_id == "Project"
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_plugins_loaded_from_directory(tmp_path, make_navigator, make_pane):
    (tmp_path / "favorites.py").write_text(
        "from paneview.ui.navigator import NavigatorPane, PanePlugin\n"
        "\n"
        "class FavoritesPane(NavigatorPane):\n"
        "    id = 'Favorites'\n"
        "    weight = 40\n"
        "\n"
        "class FavoritesPanes(PanePlugin):\n"
        "    def create_panes(self):\n"
        "        return [FavoritesPane()]\n"
    )
    navigator = make_navigator(make_pane("Project", 10))
    await navigator.initialize()
    manager = PluginManager(navigator.feed)

    assert manager.load_from_directory(str(tmp_path)) == ["FavoritesPanes"]
    manager.enable_all()
    manager.start_all()

    assert navigator.pane_ids() == ["Project", "Favorites"]
    await navigator.shutdown()
