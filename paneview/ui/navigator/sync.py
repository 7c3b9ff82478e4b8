"""
Selection Sync Controller - auto-scroll between editors and the navigator.

From source: the caret or selected editor changes, and the active pane
selects the matching node. To source: the user selects a node, and its
file opens in an editor.

Requests are debounced with an Alarm; caret lookups run as coalesced
background tasks that expire with their editor.
"""
from typing import TYPE_CHECKING, Any, Optional

from loguru import logger

from paneview.core.tasks import Alarm, CoalescingLookupQueue, LookupHandle
from .editors import FileEditor, TextEditor
from .pane import NavigatorPane
from .selection import Obsolescence

if TYPE_CHECKING:
    from .navigator import ProjectNavigator

CARET_LOOKUP_KEY = "editor-caret"


class SourceContext:
    """A file shown in an editor, selected as a whole."""

    def __init__(self, editor: FileEditor):
        self.editor = editor
        self.file = editor.file

    def select_in(self, controller: 'SelectionSyncController', request_focus: bool) -> None:
        controller.select(self.file, self.file, request_focus)


class EditorSourceContext(SourceContext):
    """A text editor: selects the element under the caret once it is known."""

    editor: TextEditor

    def select_in(self, controller: 'SelectionSyncController', request_focus: bool) -> None:
        controller.select_at_caret(self.editor, request_focus)


class SelectionSyncController:
    """
    Drives auto-scroll for one navigator.

    The obsolete-selection flag guards against a stale automatic scroll
    overriding what the user picked after the tool window was re-shown
    (see Obsolescence).
    """

    def __init__(self, navigator: 'ProjectNavigator'):
        self._navigator = navigator
        settings = navigator.config.data.navigator
        delay = settings.autoscroll_delay_ms / 1000.0
        self._from_source = Alarm(navigator.dispatcher, delay, name="autoscroll-from-source")
        self._to_source = Alarm(navigator.dispatcher, delay, name="autoscroll-to-source")
        self.lookups = CoalescingLookupQueue(navigator.dispatcher, settings.lookup_workers,
                                             name="navigator-lookup")
        self._obsolete = Obsolescence.IDLE
        self._scroll_on_focus = True
        self._selecting = False
        self._shown_pane: Optional[NavigatorPane] = None
        self._tracked_editor: Optional[TextEditor] = None
        self._caret_lookup: Optional[LookupHandle] = None
        self._caret_editor: Optional[TextEditor] = None

    @property
    def obsolescence(self) -> Obsolescence:
        return self._obsolete

    def install(self) -> None:
        editors = self._navigator.editors
        editors.focus_gained.connect(self.on_focus_gained)
        editors.focus_lost.connect(self.on_focus_lost)
        editors.selected_editor_changed.connect(self._on_editor_selected)
        self._track_caret(editors.selected_editor)

    # === Tool window and focus ===

    def tool_window_shown(self) -> None:
        self._obsolete = Obsolescence.IDLE
        navigator = self._navigator
        if not navigator.is_autoscroll_from_source(navigator.current_view_id):
            return
        context = self.find_source_context()
        if context is not None:
            self._obsolete = Obsolescence.UNSURE
            context.select_in(self, False)

    def on_focus_lost(self, editor: FileEditor) -> None:
        self._from_source.cancel_all_requests()
        self._scroll_on_focus = True

    def on_focus_gained(self, editor: FileEditor) -> None:
        armed, self._scroll_on_focus = self._scroll_on_focus, True
        if not armed:
            return
        navigator = self._navigator
        if not navigator.config.data.navigator.autoscroll_on_focus_gained:
            return
        if not navigator.is_autoscroll_from_source(navigator.current_view_id):
            return

        def scroll_if_still_open():
            if editor.is_disposed() or editor not in navigator.editors.all_editors():
                return
            if navigator.is_autoscroll_from_source(navigator.current_view_id):
                self.scroll_from_source(False)

        self._from_source.add_request(scroll_if_still_open)

    # === From source ===

    def find_source_context(self) -> Optional[SourceContext]:
        """Best context among the shown editors; text editors win."""
        editors = [e for e in self._navigator.editors.selected_editors() if not e.is_disposed()]
        for editor in editors:
            if isinstance(editor, TextEditor):
                return EditorSourceContext(editor)
        for editor in editors:
            if editor.file is not None and editor.file.valid:
                return SourceContext(editor)
        return None

    def scroll_from_source(self, request_focus: bool = False) -> bool:
        """Select the current source in the active pane. Returns False without a source."""
        self._navigator.dispatcher.assert_dispatch_thread("scroll from source")
        context = self.find_source_context()
        if context is None:
            return False
        context.select_in(self, request_focus)
        return True

    def request_scroll_from_source(self, request_focus: bool = False) -> None:
        """Debounced scroll_from_source: only the latest request runs."""
        self._from_source.add_request(lambda: self.scroll_from_source(request_focus))

    def select_at_caret(self, editor: TextEditor, request_focus: bool) -> LookupHandle:
        """
        Look up the element under the caret and select it.

        Waits for the document to be parsed. If the caret moved while the
        lookup ran, the lookup restarts at the new offset. The lookup dies
        with the editor.
        """
        offset = editor.caret_offset
        document = editor.document
        state = self._navigator.content.state

        async def compute():
            await document.wait_parsed()
            return await self.lookups.run_in_background(document.element_at, offset)

        def on_done(element):
            if editor.caret_offset != offset:
                logger.debug(f"Caret moved from {offset} during lookup, retrying")
                self.select_at_caret(editor, request_focus)
                return
            if self._navigator.content.state != state:
                logger.debug("View changed during caret lookup, result dropped")
                return
            if element is not None:
                self.select(element, editor.file, request_focus)

        handle = self.lookups.submit(compute, on_done,
                                     coalesce_by=CARET_LOOKUP_KEY,
                                     expire_when=editor.is_disposed)
        editor.disposed.connect(self._on_editor_disposed)
        self._caret_editor = editor
        self._caret_lookup = handle
        return handle

    def _on_editor_disposed(self, editor: FileEditor) -> None:
        if editor is self._caret_editor:
            if self._caret_lookup is not None:
                self._caret_lookup.cancel()
            self._caret_lookup = None
            self._caret_editor = None
        if editor is self._tracked_editor:
            self._track_caret(None)

    def _on_editor_selected(self, editor: Optional[FileEditor]) -> None:
        self._track_caret(editor)
        if editor is not None:
            self._request_if_unfocused()

    def _on_caret_moved(self, editor: TextEditor) -> None:
        self._request_if_unfocused()

    def _request_if_unfocused(self) -> None:
        navigator = self._navigator
        if navigator.is_disposed or self.is_current_pane_focused():
            return
        if navigator.is_autoscroll_from_source(navigator.current_view_id):
            self.request_scroll_from_source(False)

    def _track_caret(self, editor: Optional[FileEditor]) -> None:
        if self._tracked_editor is not None:
            self._tracked_editor.caret_moved.disconnect(self._on_caret_moved)
            self._tracked_editor = None
        if isinstance(editor, TextEditor) and not editor.is_disposed():
            editor.caret_moved.connect(self._on_caret_moved)
            editor.disposed.connect(self._on_editor_disposed)
            self._tracked_editor = editor

    # === Selection ===

    def _consume_obsolete(self, request_focus: bool) -> bool:
        if self._obsolete is Obsolescence.CONFIRMED:
            self._obsolete = Obsolescence.IDLE
            return True
        if self._obsolete is Obsolescence.UNSURE:
            self._obsolete = Obsolescence.CONFIRMED if request_focus else Obsolescence.IDLE
        return False

    def select(self, element: Any, locator: Any = None, request_focus: bool = False) -> bool:
        """
        Select element in the active pane.

        Returns:
            False if swallowed as obsolete or no pane is active
        """
        navigator = self._navigator
        navigator.dispatcher.assert_dispatch_thread("select element")
        if self._consume_obsolete(request_focus):
            logger.debug(f"Selection of {element!r} rejected: obsolete")
            return False
        pane = navigator.current_pane
        if pane is None:
            return False
        self._scroll_on_focus = not request_focus
        self.reselect(pane, element, locator, request_focus)
        return True

    def reselect(self, pane: NavigatorPane, element: Any, locator: Any = None,
                 request_focus: bool = False) -> None:
        """Programmatic pane selection; does not scroll back to source."""
        self._selecting = True
        try:
            pane.select(element, locator, request_focus)
        finally:
            self._selecting = False

    def is_current_pane_focused(self) -> bool:
        pane = self._navigator.current_pane
        return pane is not None and pane.has_focus()

    # === To source ===

    def on_pane_shown(self, pane: Optional[NavigatorPane]) -> None:
        """Follow the selection of the newly shown pane."""
        if self._shown_pane is not None:
            self._shown_pane.selection_changed.disconnect(self._on_pane_selection_changed)
        self._to_source.cancel_all_requests()
        self._shown_pane = pane
        if pane is not None:
            pane.selection_changed.connect(self._on_pane_selection_changed)

    def _on_pane_selection_changed(self, pane: NavigatorPane) -> None:
        if self._selecting or pane is not self._shown_pane:
            return
        if not self._navigator.is_autoscroll_to_source(pane.id):
            return
        self._to_source.add_request(lambda: self._open_source(pane))

    def _open_source(self, pane: NavigatorPane) -> None:
        navigator = self._navigator
        if pane.is_disposed or pane is not navigator.current_pane:
            return
        elements = pane.get_selected_elements()
        if not elements:
            return
        file = pane.source_for(elements[0])
        if file is None or not getattr(file, "valid", True):
            return
        preview = navigator.options["open_in_preview_tab"].is_selected()
        navigator.editors.open_file(file, focus=False, preview=preview)

    # === Lifecycle ===

    async def shutdown(self) -> None:
        editors = self._navigator.editors
        editors.focus_gained.disconnect(self.on_focus_gained)
        editors.focus_lost.disconnect(self.on_focus_lost)
        editors.selected_editor_changed.disconnect(self._on_editor_selected)
        self._track_caret(None)
        self._caret_editor = None
        self.on_pane_shown(None)
        self._from_source.dispose()
        self._to_source.dispose()
        await self.lookups.shutdown()
