"""The code index: files, notes and duplicate-name chains."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Iterator, Optional


class NoteKind(IntEnum):
    """What kind of thing a note names."""

    NULL = 0
    SCOPE = 1
    TYPE = 2
    CONSTANT = 3
    FUNCTION = 4
    DECL = 5
    MACRO = 6
    COMMENT_TAG = 7
    COMMENT_TODO = 8


class NoteFlag(IntFlag):
    """Extra properties of a note."""

    NONE = 0
    PROTOTYPE = 1 << 0
    PRODUCT_TYPE = 1 << 1
    SUM_TYPE = 1 << 2


@dataclass(eq=False)
class Note:
    """A named entry found while indexing a file."""

    string: str = ""
    kind: NoteKind = NoteKind.NULL
    flags: NoteFlag = NoteFlag.NONE
    range: tuple[int, int] = (0, 0)
    file: Optional["IndexFile"] = None
    file_generation: int = 0
    parent: Optional["Note"] = None
    children: list["Note"] = field(default_factory=list)
    _chain: Optional[list["Note"]] = field(default=None, repr=False)

    def _chain_position(self) -> Optional[int]:
        if self._chain is None:
            return None
        for position, note in enumerate(self._chain):
            if note is self:
                return position
        return None

    @property
    def next(self) -> Optional["Note"]:
        """The next note in this note's duplicate-name chain."""
        position = self._chain_position()
        if position is None or position + 1 >= len(self._chain):
            return None
        return self._chain[position + 1]

    @property
    def prev(self) -> Optional["Note"]:
        """The previous note in this note's duplicate-name chain."""
        position = self._chain_position()
        if not position:
            return None
        return self._chain[position - 1]

    def duplicates(self) -> Iterator["Note"]:
        """Yield this note and every later note in its duplicate-name chain."""
        note: Optional[Note] = self
        while note is not None:
            yield note
            note = note.next


@dataclass(eq=False)
class IndexFile:
    """The notes indexed for one buffer."""

    buffer: int
    notes: list[Note] = field(default_factory=list)
    generation: int = 0


class CodeIndex:
    """All indexed files and the global table of notes by name."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._files: dict[int, IndexFile] = {}
        # Chains of notes sharing a name, most recently started chain first.
        self._chains: dict[str, list[list[Note]]] = {}

    def lookup_file(self, buffer: int) -> Optional[IndexFile]:
        """Return the index file for ``buffer`` if there is one."""
        return self._files.get(buffer)

    def lookup_or_make_file(self, buffer: int) -> IndexFile:
        """Return the index file for ``buffer``, creating it when missing."""
        file = self._files.get(buffer)
        if file is None:
            file = IndexFile(buffer)
            self._files[buffer] = file
        return file

    def erase_file(self, buffer: int) -> None:
        """Forget the index file for ``buffer``."""
        self._files.pop(buffer, None)

    def _free_note_tree(self, note: Note) -> None:
        for child in note.children:
            self._free_note_tree(child)
        chain = note._chain
        if chain is None:
            return
        chain[:] = [other for other in chain if other is not note]
        if not chain:
            chains = self._chains.get(note.string, [])
            chains[:] = [other for other in chains if other is not chain]
            if not chains:
                self._chains.pop(note.string, None)
        note._chain = None

    def clear_file(self, file: Optional[IndexFile]) -> None:
        """Drop every note of ``file`` and bump its generation."""
        if file is None:
            return
        file.generation += 1
        for note in file.notes:
            self._free_note_tree(note)
        file.notes = []

    def lookup_note(self, string: str, parent: Optional[Note] = None) -> Optional[Note]:
        """Return the head of the chain named ``string`` whose head has ``parent``."""
        for chain in self._chains.get(string, []):
            head = chain[0]
            if head.parent is parent:
                return head
        return None

    def insert_note(
        self,
        file: Optional[IndexFile],
        parent: Optional[Note],
        note: Note,
        string: str,
        name_range: tuple[int, int],
        kind: NoteKind,
        flags: NoteFlag,
    ) -> None:
        """Fill in ``note`` and link it into the name table and the file's tree.

        Nothing happens when ``file`` is None.
        """
        if file is None:
            return

        head = self.lookup_note(string)
        if head is not None and head._chain is not None:
            chain = head._chain
            chain.append(note)
        else:
            chain = [note]
            self._chains.setdefault(string, []).insert(0, chain)
        note._chain = chain

        note.parent = parent
        if parent is not None:
            parent.children.append(note)
        else:
            file.notes.append(note)

        note.string = string
        note.kind = NoteKind(kind)
        note.flags = NoteFlag(flags)
        note.range = tuple(name_range)
        note.file = file
        note.file_generation = file.generation

    def make_note(
        self,
        file: Optional[IndexFile],
        parent: Optional[Note],
        string: str,
        name_range: tuple[int, int],
        kind: NoteKind,
        flags: NoteFlag,
    ) -> Note:
        """Create a note and insert it; see :meth:`insert_note`."""
        note = Note()
        self.insert_note(file, parent, note, string, name_range, kind, flags)
        return note