"""
Plugin System.

Plugin lifecycle and discovery. Navigator panes are contributed by
plugins; starting or stopping a plugin is what adds or removes panes.
"""
from .plugin_base import Plugin, PluginState
from .plugin_manager import PluginManager

__all__ = ['Plugin', 'PluginState', 'PluginManager']
