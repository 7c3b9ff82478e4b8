"""
Plugin Manager - discovery, bulk lifecycle and hot reload.
"""
import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional, Type

from loguru import logger

from .plugin_base import Plugin, PluginState


def find_plugin_class(module: ModuleType) -> Optional[Type[Plugin]]:
    """First Plugin subclass defined in module itself (imported bases are skipped)."""
    for value in vars(module).values():
        if (isinstance(value, type) and issubclass(value, Plugin)
                and value.__module__ == module.__name__):
            return value
    return None


class PluginManager:
    """
    Owns the loaded plugins, keyed by name, and the class each came from.

    Usage:
        manager = PluginManager(feed)
        manager.load_from_directory("plugins/")
        manager.enable_all()
        manager.start_all()
        manager.reload_plugin("ScopePanes")
    """

    def __init__(self, context: Any):
        self._context = context
        self._plugins: Dict[str, Plugin] = {}
        self._classes: Dict[str, Type[Plugin]] = {}

    # --- loading ---

    def register_plugin_class(self, name: str, plugin_cls: Type[Plugin]) -> None:
        """Class used for name on its next reload (lets a reload swap in new code)."""
        self._classes[name] = plugin_cls
        logger.debug(f"Registered plugin class for {name}: {plugin_cls.__name__}")

    def load_plugin_class(self, plugin_cls: Type[Plugin]) -> Optional[str]:
        """Instantiate and load plugin_cls. Returns its name, None if refused."""
        plugin = plugin_cls()
        if plugin.name in self._plugins:
            logger.warning(f"Plugin already loaded: {plugin.name}")
            return None
        if not plugin.load(self._context):
            return None
        self._plugins[plugin.name] = plugin
        self._classes.setdefault(plugin.name, plugin_cls)
        return plugin.name

    def load_plugin(self, plugin_path: str) -> Optional[str]:
        path = Path(plugin_path)
        if path.suffix != ".py" or not path.is_file():
            return None
        try:
            module = self._import_file(path)
        except Exception as e:
            logger.error(f"Failed to import plugin {path}: {e}")
            return None
        plugin_cls = find_plugin_class(module)
        if plugin_cls is None:
            logger.debug(f"No plugin class in {path}")
            return None
        return self.load_plugin_class(plugin_cls)

    def load_from_directory(self, directory: str) -> List[str]:
        """Load every public *.py in directory, in name order."""
        folder = Path(directory)
        if not folder.is_dir():
            return []
        loaded = [name for name in (self.load_plugin(str(file))
                                    for file in sorted(folder.glob("*.py"))
                                    if not file.stem.startswith("_"))
                  if name]
        logger.info(f"Loaded {len(loaded)} plugins from {directory}")
        return loaded

    @staticmethod
    def _import_file(path: Path) -> ModuleType:
        spec = importlib.util.spec_from_file_location(path.stem, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"cannot import {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    # --- queries ---

    def get_plugin(self, name: str) -> Optional[Plugin]:
        return self._plugins.get(name)

    def get_all_plugins(self) -> List[Plugin]:
        return list(self._plugins.values())

    # --- bulk lifecycle ---

    def _each(self, state: PluginState, action: str) -> List[Plugin]:
        """Run action on every plugin currently in state; returns those that succeeded."""
        return [plugin for plugin in list(self._plugins.values())
                if plugin.state is state and getattr(plugin, action)()]

    def enable_all(self) -> None:
        self._each(PluginState.LOADED, "enable")

    def start_all(self) -> None:
        self._each(PluginState.ENABLED, "start")

    def stop_all(self) -> None:
        self._each(PluginState.STARTED, "stop")

    def disable_all(self) -> None:
        self._each(PluginState.ENABLED, "disable")

    def unload_all(self) -> None:
        for plugin in self._each(PluginState.LOADED, "unload"):
            del self._plugins[plugin.name]

    # --- hot reload ---

    def reload_plugin(self, name: str) -> bool:
        """
        Tear the named plugin down and bring a fresh instance of its class
        up to STARTED. Returns False if it is unknown or any step fails.
        """
        plugin = self._plugins.get(name)
        plugin_cls = self._classes.get(name)
        if plugin is None or plugin_cls is None:
            logger.warning(f"Cannot reload unknown plugin: {name}")
            return False

        plugin.stop()
        plugin.disable()
        if not plugin.unload():
            logger.error(f"Plugin {name} did not unload, reload aborted")
            return False
        del self._plugins[name]

        if self.load_plugin_class(plugin_cls) is None:
            return False
        fresh = self._plugins[name]
        ok = fresh.enable() and fresh.start()
        logger.info(f"Plugin reloaded: {name} ({'ok' if ok else 'failed'})")
        return ok
