"""
Tests for Plugin lifecycle and PluginManager.
"""
from paneview.core.plugins import Plugin, PluginManager, PluginState


class RecordingPlugin(Plugin):
    def __init__(self, name=None):
        super().__init__(name)
        self.hooks = []

    def on_load(self):
        self.hooks.append("load")

    def on_enable(self):
        self.hooks.append("enable")

    def on_start(self):
        self.hooks.append("start")

    def on_stop(self):
        self.hooks.append("stop")

    def on_disable(self):
        self.hooks.append("disable")

    def on_unload(self):
        self.hooks.append("unload")


class BrokenStartPlugin(Plugin):
    def on_start(self):
        raise RuntimeError("cannot start")


def test_full_lifecycle():
    plugin = RecordingPlugin()
    context = object()

    assert plugin.load(context)
    assert plugin.context is context
    assert plugin.enable()
    assert plugin.start()
    assert plugin.state == PluginState.STARTED
    assert plugin.stop()
    assert plugin.disable()
    assert plugin.unload()

    assert plugin.hooks == ["load", "enable", "start", "stop", "disable", "unload"]
    assert plugin.context is None


def test_transitions_out_of_order_are_refused():
    plugin = RecordingPlugin()
    assert not plugin.start()
    assert not plugin.enable()
    plugin.load(None)
    assert not plugin.start()
    assert plugin.hooks == ["load"]


def test_failing_hook_keeps_state(log_records):
    plugin = BrokenStartPlugin()
    plugin.load(None)
    plugin.enable()

    assert not plugin.start()
    assert plugin.state == PluginState.ENABLED
    assert any(r["level"].name == "ERROR" for r in log_records)


def test_manager_bulk_lifecycle():
    manager = PluginManager(context="ctx")
    name = manager.load_plugin_class(RecordingPlugin)
    assert name == "RecordingPlugin"
    assert manager.load_plugin_class(RecordingPlugin) is None

    manager.enable_all()
    manager.start_all()
    plugin = manager.get_plugin(name)
    assert plugin.state == PluginState.STARTED
    assert plugin.context == "ctx"

    manager.stop_all()
    manager.disable_all()
    manager.unload_all()
    assert manager.get_all_plugins() == []


def test_reload_plugin_creates_fresh_instance():
    manager = PluginManager(context=None)
    manager.load_plugin_class(RecordingPlugin)
    manager.enable_all()
    manager.start_all()
    old = manager.get_plugin("RecordingPlugin")

    assert manager.reload_plugin("RecordingPlugin")

    fresh = manager.get_plugin("RecordingPlugin")
    assert fresh is not old
    assert fresh.state == PluginState.STARTED
    assert old.state == PluginState.UNLOADED
    assert old.hooks[-3:] == ["stop", "disable", "unload"]


def test_reload_unknown_plugin():
    assert not PluginManager(context=None).reload_plugin("missing")


def test_load_from_directory(tmp_path):
    (tmp_path / "greeting.py").write_text(
        "from paneview.core.plugins import Plugin\n"
        "class GreetingPlugin(Plugin):\n"
        "    pass\n"
    )
    (tmp_path / "_private.py").write_text("raise RuntimeError('must not load')\n")
    (tmp_path / "broken.py").write_text("import no_such_module_here\n")

    manager = PluginManager(context=None)
    loaded = manager.load_from_directory(str(tmp_path))

    assert loaded == ["GreetingPlugin"]
    assert manager.get_plugin("GreetingPlugin").state == PluginState.LOADED


def test_reload_uses_registered_class():
    class PatchedPlugin(RecordingPlugin):
        def __init__(self, name="RecordingPlugin"):
            super().__init__(name)

    manager = PluginManager(context=None)
    manager.load_plugin_class(RecordingPlugin)
    manager.enable_all()
    manager.start_all()

    manager.register_plugin_class("RecordingPlugin", PatchedPlugin)
    assert manager.reload_plugin("RecordingPlugin")
    assert isinstance(manager.get_plugin("RecordingPlugin"), PatchedPlugin)
