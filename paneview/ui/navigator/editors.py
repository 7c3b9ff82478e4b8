"""
Source side of the selection sync: files, documents, editors.

These are the collaborators the sync controller needs from the editor
layer. They carry just enough behaviour to be driven by an editor host
(or by tests): caret tracking, parse state, focus and selection events.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from paneview.core.events import Signal


@dataclass(eq=False)
class SourceFile:
    """A file on disk, identified by path."""
    path: str
    valid: bool = True

    def __eq__(self, other) -> bool:
        return isinstance(other, SourceFile) and other.path == self.path

    def __hash__(self) -> int:
        return hash(self.path)


@dataclass(frozen=True)
class SourceElement:
    """The structural element found at a caret offset."""
    file: SourceFile
    offset: int
    line: int


ElementResolver = Callable[['SourceDocument', int], Optional[SourceElement]]


def line_resolver(document: 'SourceDocument', offset: int) -> Optional[SourceElement]:
    """Default resolver: the element is the line containing offset."""
    if offset < 0 or offset > len(document.text):
        return None
    return SourceElement(document.file, offset, document.text.count("\n", 0, offset))


class SourceDocument:
    """
    Text of a file plus its parse state.

    Lookups at an offset are only meaningful once the document is
    parsed; `wait_parsed()` blocks a lookup coroutine until then.
    """

    def __init__(self, file: SourceFile, text: str = "",
                 resolver: ElementResolver = line_resolver, parsed: bool = True):
        self.file = file
        self.text = text
        self._resolver = resolver
        self._parsed = asyncio.Event()
        if parsed:
            self._parsed.set()
        self._disposed = False

    @property
    def is_parsed(self) -> bool:
        return self._parsed.is_set()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def mark_modified(self, text: Optional[str] = None) -> None:
        if text is not None:
            self.text = text
        self._parsed.clear()

    def mark_parsed(self) -> None:
        self._parsed.set()

    async def wait_parsed(self) -> None:
        await self._parsed.wait()

    def element_at(self, offset: int) -> Optional[SourceElement]:
        """Resolve the element at offset. May be called on a worker thread."""
        return self._resolver(self, offset)

    def dispose(self) -> None:
        self._disposed = True


class FileEditor:
    """An editor tab showing a file (not necessarily text)."""

    def __init__(self, file: Optional[SourceFile]):
        self.file = file
        self._disposed = False
        self.disposed = Signal("editor.disposed")

    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.disposed.emit(self)
        self.disposed.clear()

    def __repr__(self) -> str:
        path = self.file.path if self.file else None
        return f"{type(self).__name__}({path!r})"


class TextEditor(FileEditor):
    """A text editor: a document and a caret."""

    def __init__(self, document: SourceDocument, caret_offset: int = 0):
        super().__init__(document.file)
        self.document = document
        self._caret_offset = caret_offset
        self.caret_moved = Signal("editor.caret_moved")

    @property
    def caret_offset(self) -> int:
        return self._caret_offset

    @caret_offset.setter
    def caret_offset(self, offset: int) -> None:
        if offset == self._caret_offset:
            return
        self._caret_offset = offset
        self.caret_moved.emit(self)

    def is_disposed(self) -> bool:
        return self._disposed or self.document.is_disposed


@dataclass
class OpenFileRequest:
    """Record of an open_file call, for hosts that render editors lazily."""
    file: SourceFile
    focus: bool
    preview: bool
    editors: List[FileEditor] = field(default_factory=list)


class EditorManager:
    """
    Tracks open editors, the selected one, and focus changes.

    Signals:
        selected_editor_changed(editor): Selected tab changed
        focus_gained(editor) / focus_lost(editor): Editor focus changes
        file_opened(OpenFileRequest): open_file() was called
    """

    def __init__(self):
        self._editors: List[FileEditor] = []
        self._selected: Optional[FileEditor] = None
        self.selected_editor_changed = Signal("editors.selected_changed")
        self.focus_gained = Signal("editors.focus_gained")
        self.focus_lost = Signal("editors.focus_lost")
        self.file_opened = Signal("editors.file_opened")

    @property
    def selected_editor(self) -> Optional[FileEditor]:
        return self._selected

    def selected_editors(self) -> List[FileEditor]:
        """Editors visible in every split. Only one split is tracked here."""
        return [self._selected] if self._selected is not None else []

    def all_editors(self) -> List[FileEditor]:
        return list(self._editors)

    def open_editor(self, editor: FileEditor, select: bool = True) -> FileEditor:
        if editor not in self._editors:
            self._editors.append(editor)
        if select:
            self.select_editor(editor)
        return editor

    def close_editor(self, editor: FileEditor) -> None:
        if editor not in self._editors:
            return
        self._editors.remove(editor)
        editor.dispose()
        if self._selected is editor:
            self._selected = self._editors[-1] if self._editors else None
            self.selected_editor_changed.emit(self._selected)

    def select_editor(self, editor: Optional[FileEditor]) -> None:
        if editor is self._selected:
            return
        self._selected = editor
        self.selected_editor_changed.emit(editor)

    def open_file(self, file: SourceFile, focus: bool = False, preview: bool = False) -> List[FileEditor]:
        """Show file in an editor, reusing an open one."""
        editors = [e for e in self._editors if e.file == file]
        if not editors:
            editors = [self.open_editor(FileEditor(file), select=False)]
        self.select_editor(editors[0])
        logger.debug(f"Opened {file.path} (focus={focus}, preview={preview})")
        self.file_opened.emit(OpenFileRequest(file, focus, preview, editors))
        return editors

    def notify_focus_gained(self, editor: FileEditor) -> None:
        self.focus_gained.emit(editor)

    def notify_focus_lost(self, editor: FileEditor) -> None:
        self.focus_lost.emit(editor)
