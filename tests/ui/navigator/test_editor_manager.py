"""
Tests for the editor-side collaborators.
"""
import asyncio

import pytest

from paneview.ui.navigator import EditorManager, FileEditor, SourceDocument, SourceFile, TextEditor


def test_open_file_reuses_editor():
    editors = EditorManager()
    opened = []
    editors.file_opened.connect(opened.append)
    source = SourceFile("a.py")

    first = editors.open_file(source, focus=False, preview=True)
    second = editors.open_file(SourceFile("a.py"))

    assert first == second
    assert len(editors.all_editors()) == 1
    assert editors.selected_editor.file == source
    assert [r.preview for r in opened] == [True, False]


def test_close_selected_editor_selects_last():
    editors = EditorManager()
    a = editors.open_editor(FileEditor(SourceFile("a.py")))
    b = editors.open_editor(FileEditor(SourceFile("b.py")))
    changes = []
    editors.selected_editor_changed.connect(changes.append)

    editors.close_editor(b)

    assert b.is_disposed()
    assert editors.selected_editor is a
    assert changes == [a]
    assert editors.selected_editors() == [a]


def test_caret_moves_notify_only_on_change():
    editor = TextEditor(SourceDocument(SourceFile("a.py"), "abc"))
    moves = []
    editor.caret_moved.connect(lambda e: moves.append(e.caret_offset))

    editor.caret_offset = 2
    editor.caret_offset = 2
    editor.caret_offset = 1

    assert moves == [2, 1]


def test_element_at_offset():
    document = SourceDocument(SourceFile("a.py"), "one\ntwo\nthree")
    assert document.element_at(5).line == 1
    assert document.element_at(100) is None


def test_text_editor_disposed_with_document():
    document = SourceDocument(SourceFile("a.py"), "")
    editor = TextEditor(document)
    document.dispose()
    assert editor.is_disposed()


@pytest.mark.asyncio
async def test_wait_parsed():
    document = SourceDocument(SourceFile("a.py"), "x = 1")
    document.mark_modified("x = 2")
    assert not document.is_parsed

    waiter = asyncio.ensure_future(document.wait_parsed())
    await asyncio.sleep(0)
    assert not waiter.done()

    document.mark_parsed()
    await asyncio.wait_for(waiter, 1)
    assert document.text == "x = 2"
