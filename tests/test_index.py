import pytest

from fleuryidx.index import CodeIndex, NoteFlag, NoteKind


@pytest.fixture
def index():
    return CodeIndex()


def test_lookup_or_make_file_is_stable(index):
    assert index.lookup_file(7) is None
    file = index.lookup_or_make_file(7)
    assert file.buffer == 7
    assert index.lookup_or_make_file(7) is file
    assert index.lookup_file(7) is file


def test_erase_file(index):
    file = index.lookup_or_make_file(3)
    index.erase_file(3)
    assert index.lookup_file(3) is None
    assert index.lookup_or_make_file(3) is not file


def test_make_note_fills_fields(index):
    file = index.lookup_or_make_file(1)
    note = index.make_note(file, None, "Foo", (10, 13), NoteKind.TYPE, NoteFlag.PRODUCT_TYPE)
    assert note.string == "Foo"
    assert note.kind == NoteKind.TYPE
    assert note.flags == NoteFlag.PRODUCT_TYPE
    assert note.range == (10, 13)
    assert note.file is file
    assert note.file_generation == file.generation
    assert file.notes == [note]
    assert index.lookup_note("Foo") is note


def test_duplicate_chain(index):
    file = index.lookup_or_make_file(1)
    first = index.make_note(file, None, "x", (0, 1), NoteKind.DECL, NoteFlag.NONE)
    second = index.make_note(file, None, "x", (5, 6), NoteKind.FUNCTION, NoteFlag.NONE)
    assert index.lookup_note("x") is first
    assert first.next is second
    assert second.prev is first
    assert first.prev is None
    assert list(first.duplicates()) == [first, second]


def test_child_notes(index):
    file = index.lookup_or_make_file(1)
    parent = index.make_note(file, None, "S", (0, 1), NoteKind.TYPE, NoteFlag.NONE)
    child = index.make_note(file, parent, "member", (3, 9), NoteKind.DECL, NoteFlag.NONE)
    assert child.parent is parent
    assert parent.children == [child]
    assert file.notes == [parent]
    assert index.lookup_note("member", parent) is child
    assert index.lookup_note("member") is None


def test_child_joins_chain_of_root_head(index):
    file = index.lookup_or_make_file(1)
    root = index.make_note(file, None, "n", (0, 1), NoteKind.DECL, NoteFlag.NONE)
    parent = index.make_note(file, None, "P", (2, 3), NoteKind.TYPE, NoteFlag.NONE)
    child = index.make_note(file, parent, "n", (4, 5), NoteKind.DECL, NoteFlag.NONE)
    assert root.next is child
    assert index.lookup_note("n", parent) is None


def test_clear_file(index):
    file = index.lookup_or_make_file(1)
    parent = index.make_note(file, None, "S", (0, 1), NoteKind.TYPE, NoteFlag.NONE)
    index.make_note(file, parent, "m", (2, 3), NoteKind.DECL, NoteFlag.NONE)
    before = file.generation
    index.clear_file(file)
    assert file.generation == before + 1
    assert file.notes == []
    assert index.lookup_note("S") is None
    assert index.lookup_note("m", parent) is None


def test_clear_file_keeps_other_files_duplicates(index):
    one = index.lookup_or_make_file(1)
    two = index.lookup_or_make_file(2)
    a = index.make_note(one, None, "f", (0, 1), NoteKind.FUNCTION, NoteFlag.NONE)
    b = index.make_note(two, None, "f", (0, 1), NoteKind.FUNCTION, NoteFlag.NONE)
    assert a.next is b
    index.clear_file(one)
    assert index.lookup_note("f") is b
    assert b.prev is None
    assert b.next is None


def test_notes_after_clear_carry_new_generation(index):
    file = index.lookup_or_make_file(1)
    index.clear_file(file)
    note = index.make_note(file, None, "g", (0, 1), NoteKind.CONSTANT, NoteFlag.NONE)
    assert note.file_generation == file.generation


def test_make_note_without_file_is_not_registered(index):
    note = index.make_note(None, None, "ghost", (0, 5), NoteKind.DECL, NoteFlag.NONE)
    assert note.kind == NoteKind.NULL
    assert index.lookup_note("ghost") is None


def test_clear_none_is_harmless(index):
    file = index.lookup_or_make_file(1)
    note = index.make_note(file, None, "k", (0, 1), NoteKind.MACRO, NoteFlag.NONE)
    index.clear_file(None)
    assert index.lookup_note("k") is note