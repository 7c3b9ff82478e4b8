"""
View option stores.

Every option write lands in three places: the live per-project state,
the process-wide default template new projects copy, and the global
shared settings.
"""
from typing import Optional

from pydantic import BaseModel


class ViewState(BaseModel):
    """Per-project option flags."""
    abbreviate_package_names: bool = False
    autoscroll_from_source: bool = False
    autoscroll_to_source: bool = False
    compact_directories: bool = False
    flatten_modules: bool = False
    flatten_packages: bool = False
    folders_always_on_top: bool = True
    hide_empty_middle_packages: bool = True
    manual_order: bool = False
    show_excluded_files: bool = True
    show_library_contents: bool = True
    show_members: bool = False
    show_modules: bool = True
    show_visibility_icons: bool = False
    sort_by_type: bool = False
    use_file_nesting_rules: bool = True


class SharedViewSettings(BaseModel):
    """Global settings shared by every project."""
    abbreviate_package_names: bool = False
    autoscroll_from_source: bool = False
    autoscroll_to_source: bool = False
    compact_directories: bool = False
    flatten_modules: bool = False
    flatten_packages: bool = False
    folders_always_on_top: bool = True
    hide_empty_middle_packages: bool = True
    manual_order: bool = False
    open_in_preview_tab: bool = False
    show_excluded_files: bool = True
    show_library_contents: bool = True
    show_members: bool = False
    show_modules: bool = True
    show_visibility_icons: bool = False
    sort_by_type: bool = False


class ViewSettingsStore:
    """Default template + shared settings, one per process."""

    def __init__(self, default_state: Optional[ViewState] = None,
                 shared: Optional[SharedViewSettings] = None):
        self.default_state = default_state or ViewState()
        self.shared = shared or SharedViewSettings()

    def new_project_state(self) -> ViewState:
        return self.default_state.model_copy()


_default_store: Optional[ViewSettingsStore] = None


def default_settings_store() -> ViewSettingsStore:
    global _default_store
    if _default_store is None:
        _default_store = ViewSettingsStore()
    return _default_store
