"""
View options - one data-driven table instead of a class per toggle.

An option's stored flag means nothing on its own: readers must also
check that the option is enabled for the pane they are rendering
(`ViewOptions.is_active`).
"""
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Iterator, Optional, Union

from loguru import logger

from .pane import Capability, NavigatorPane

if TYPE_CHECKING:
    from .navigator import ProjectNavigator


class RefreshMode(Enum):
    """What a changed option does to the panes."""
    NONE = "none"
    PLAIN = "plain"
    COMPARATOR = "comparator"


EnabledFor = Callable[['ProjectNavigator', NavigatorPane], bool]
OnChange = Callable[['ProjectNavigator', bool], None]


@dataclass(frozen=True)
class OptionSpec:
    """
    Attributes:
        name: Option name, also the ViewState field when project_field is None
        project_field: Field in the per-project state and default template,
            empty string for options that live only in the shared store
        shared_field: Field in the shared settings, empty string for none
        enabled_for: Pane gate
        refresh: Pane refresh triggered when the value actually changes
        on_change: Extra side effect after every write
    """
    name: str
    enabled_for: EnabledFor
    refresh: RefreshMode = RefreshMode.PLAIN
    project_field: Optional[str] = None
    shared_field: Optional[str] = None
    on_change: Optional[OnChange] = None

    @property
    def project_attr(self) -> str:
        return self.name if self.project_field is None else self.project_field

    @property
    def shared_attr(self) -> str:
        return self.name if self.shared_field is None else self.shared_field


def _always(navigator, pane) -> bool:
    return True


def _capability(capability: Capability) -> EnabledFor:
    def enabled(navigator, pane) -> bool:
        return pane.supports(capability)
    return enabled


def _abbreviate_enabled(navigator, pane) -> bool:
    return (navigator.options.is_active("flatten_packages", pane.id)
            and pane.supports(Capability.ABBREVIATE_PACKAGE_NAMES))


def _show_members_enabled(navigator, pane) -> bool:
    return navigator.config.data.navigator.show_members_supported


def _scroll_now_if_unfocused(navigator, selected: bool) -> None:
    if selected and navigator.sync is not None and not navigator.sync.is_current_pane_focused():
        navigator.sync.scroll_from_source(False)


OPTION_SPECS = (
    OptionSpec("abbreviate_package_names", _abbreviate_enabled),
    OptionSpec("autoscroll_from_source", _always, RefreshMode.NONE,
               on_change=_scroll_now_if_unfocused),
    OptionSpec("autoscroll_to_source", _always, RefreshMode.NONE),
    OptionSpec("open_in_preview_tab", _always, RefreshMode.NONE, project_field=""),
    OptionSpec("compact_directories", _capability(Capability.COMPACT_DIRECTORIES)),
    OptionSpec("flatten_modules", _capability(Capability.FLATTEN_MODULES)),
    OptionSpec("flatten_packages", _capability(Capability.FLATTEN_PACKAGES)),
    OptionSpec("folders_always_on_top", _capability(Capability.FOLDERS_ALWAYS_ON_TOP),
               RefreshMode.COMPARATOR),
    OptionSpec("hide_empty_middle_packages", _capability(Capability.HIDE_EMPTY_MIDDLE_PACKAGES)),
    OptionSpec("manual_order", _capability(Capability.MANUAL_ORDER), RefreshMode.COMPARATOR),
    OptionSpec("show_excluded_files", _capability(Capability.SHOW_EXCLUDED_FILES)),
    OptionSpec("show_library_contents", _capability(Capability.SHOW_LIBRARY_CONTENTS)),
    OptionSpec("show_members", _show_members_enabled),
    OptionSpec("show_modules", _capability(Capability.SHOW_MODULES)),
    OptionSpec("show_visibility_icons", _always),
    OptionSpec("sort_by_type", _capability(Capability.SORT_BY_TYPE), RefreshMode.COMPARATOR),
    OptionSpec("use_file_nesting_rules", _capability(Capability.FILE_NESTING), shared_field=""),
)


class Option:
    """A named toggle bound to one navigator."""

    def __init__(self, spec: OptionSpec, navigator: 'ProjectNavigator'):
        self.spec = spec
        self._navigator = navigator

    @property
    def name(self) -> str:
        return self.spec.name

    def is_selected(self) -> bool:
        if self.spec.project_attr:
            return getattr(self._navigator.view_state, self.spec.project_attr)
        return getattr(self._navigator.settings_store.shared, self.spec.shared_attr)

    def is_enabled(self, pane: Union[NavigatorPane, str, None] = None) -> bool:
        """
        Whether the option applies to pane.

        Args:
            pane: Pane, pane id, or None for the current view
        """
        if pane is None:
            pane = self._navigator.current_view_id
        if pane is None or isinstance(pane, str):
            pane = self._navigator.registry.live_pane(pane)
        if pane is None:
            return False
        return bool(self.spec.enabled_for(self._navigator, pane))

    def set_selected(self, selected: bool) -> None:
        navigator = self._navigator
        if navigator.is_disposed:
            return
        updated = selected != self.is_selected()
        if self.spec.project_attr:
            setattr(navigator.view_state, self.spec.project_attr, selected)
            setattr(navigator.settings_store.default_state, self.spec.project_attr, selected)
        if self.spec.shared_attr:
            setattr(navigator.settings_store.shared, self.spec.shared_attr, selected)
        logger.debug(f"Option {self.name} = {selected}")

        if updated and self.spec.refresh is not RefreshMode.NONE:
            navigator.update_panes(self.spec.refresh is RefreshMode.COMPARATOR)
        if self.spec.on_change is not None:
            self.spec.on_change(navigator, selected)

    def __repr__(self) -> str:
        return f"Option({self.name}={self.is_selected()})"


class ViewOptions:
    """
    All options of one navigator, looked up by name.

    Usage:
        if navigator.options.is_active("sort_by_type", pane.id):
            ...
        navigator.options.set_for_pane("flatten_packages", pane.id, True)
    """

    def __init__(self, navigator: 'ProjectNavigator'):
        self._navigator = navigator
        self._options: Dict[str, Option] = {
            spec.name: Option(spec, navigator) for spec in OPTION_SPECS
        }

    def __getitem__(self, name: str) -> Option:
        return self._options[name]

    def __iter__(self) -> Iterator[Option]:
        return iter(self._options.values())

    def __contains__(self, name: str) -> bool:
        return name in self._options

    def is_active(self, name: str, pane_id: Optional[str]) -> bool:
        """Selected AND enabled for the pane."""
        option = self._options[name]
        return option.is_selected() and option.is_enabled(pane_id)

    def set_for_pane(self, name: str, pane_id: Optional[str], value: bool) -> bool:
        """Write the option only if it applies to the pane. Returns True if written."""
        option = self._options[name]
        if not option.is_enabled(pane_id):
            return False
        option.set_selected(value)
        return True

    def snapshot(self) -> Dict[str, bool]:
        """Per-project flags, for persistence."""
        return {o.name: o.is_selected() for o in self if o.spec.project_attr}

    def apply(self, flags: Dict[str, bool]) -> None:
        """Restore per-project flags without side effects."""
        state = self._navigator.view_state
        for name, value in flags.items():
            option = self._options.get(name)
            if option is None or not option.spec.project_attr or not isinstance(value, bool):
                logger.debug(f"Ignoring persisted option {name!r}")
                continue
            setattr(state, option.spec.project_attr, value)
