"""Legos: small clipboard slots bound to function keys."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

MAX_LEGOS = 12


class LegoKind(IntEnum):
    """What a lego holds."""

    NULL = 0
    STRING = 1
    MACRO = 2
    FILE = 3


@dataclass
class Lego:
    """One slot holding a piece of text."""

    kind: LegoKind = LegoKind.NULL
    string: str = ""

    def store(self, kind: LegoKind, string: str) -> None:
        """Replace the contents of the slot."""
        self.kind = LegoKind(kind)
        self.string = string

    def place(self, text: str, pos: int) -> tuple[str, tuple[int, int]]:
        """Insert the slot's contents into ``text`` at ``pos``.

        Returns the new text and the inserted range; the range is empty and
        the text unchanged when the slot holds no string.
        """
        if not 0 <= pos <= len(text):
            raise ValueError(f"position {pos} outside text of length {len(text)}")
        if self.kind != LegoKind.STRING:
            return text, (pos, pos)
        new_text = text[:pos] + self.string + text[pos:]
        return new_text, (pos, pos + len(self.string))


class LegoBoard:
    """The fixed set of lego slots."""

    def __init__(self) -> None:
        self._legos = [Lego() for _ in range(MAX_LEGOS)]

    def from_index(self, index: int) -> Optional[Lego]:
        """Return slot ``index``, or None when out of range."""
        if 0 <= index < MAX_LEGOS:
            return self._legos[index]
        return None

    def from_function_key(self, key_number: int) -> Optional[Lego]:
        """Return the slot for function key F``key_number`` (F1 to F24)."""
        if 1 <= key_number <= 24:
            return self.from_index((key_number - 1) % 4)
        return None