"""Tokens produced by the lexers and iteration over token arrays."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Optional, Sequence


class TokenBaseKind(IntEnum):
    """Language-independent classification of a token."""

    EOF = 0
    WHITESPACE = 1
    LEX_ERROR = 2
    COMMENT = 3
    KEYWORD = 4
    PREPROCESSOR = 5
    IDENTIFIER = 6
    OPERATOR = 7
    LITERAL_INTEGER = 8
    LITERAL_FLOAT = 9
    LITERAL_STRING = 10
    SCOPE_OPEN = 11
    SCOPE_CLOSE = 12
    PARENTHETICAL_OPEN = 13
    PARENTHETICAL_CLOSE = 14
    STATEMENT_CLOSE = 15


class TokenFlag(IntFlag):
    """Extra bits attached to a token."""

    NONE = 0
    PREPROCESSOR_BODY = 1


@dataclass(eq=False)
class Token:
    """A lexed token: a span of text with a base kind and a language sub-kind."""

    pos: int
    size: int
    kind: TokenBaseKind
    sub_kind: int = 0
    flags: TokenFlag = TokenFlag.NONE

    def range(self) -> tuple[int, int]:
        """Return the half-open text range ``(first, one_past_last)``."""
        return (self.pos, self.pos + self.size)


class TokenIterator:
    """A cursor over a token sequence that can skip whitespace."""

    def __init__(self, tokens: Sequence[Token], index: int = 0) -> None:
        self.tokens = tokens
        self.index = _clamp_index(tokens, index)

    def read(self) -> Optional[Token]:
        """Return the token under the cursor, or None for an empty sequence."""
        if not self.tokens:
            return None
        return self.tokens[self.index]

    def inc_all(self) -> bool:
        """Step to the next token; False when already at the last one."""
        if self.index + 1 < len(self.tokens):
            self.index += 1
            return True
        return False

    def inc_non_whitespace(self) -> bool:
        """Step forward to the next non-whitespace token.

        On failure the cursor is left on the last token.
        """
        last = len(self.tokens) - 1
        while self.index < last:
            self.index += 1
            if self.tokens[self.index].kind != TokenBaseKind.WHITESPACE:
                return True
        return False

    def dec_non_whitespace(self) -> bool:
        """Step backward to the previous non-whitespace token.

        On failure the cursor is left on the first token.
        """
        while self.index > 0:
            self.index -= 1
            if self.tokens[self.index].kind != TokenBaseKind.WHITESPACE:
                return True
        return False


def _clamp_index(tokens: Sequence[Token], index: int) -> int:
    if not tokens:
        return 0
    return max(0, min(index, len(tokens) - 1))


def token_index_from_pos(tokens: Sequence[Token], pos: int) -> int:
    """Return the index of the token covering ``pos``, clamped to the sequence."""
    if not tokens:
        return 0
    index = bisect.bisect_right(tokens, pos, key=lambda token: token.pos) - 1
    return _clamp_index(tokens, index)


def iterator_at_pos(tokens: Sequence[Token], pos: int) -> TokenIterator:
    """Return an iterator placed on the token covering ``pos``."""
    return TokenIterator(tokens, token_index_from_pos(tokens, pos))


def iterator_at_index(tokens: Sequence[Token], index: int) -> TokenIterator:
    """Return an iterator placed on ``index``, clamped to the sequence."""
    return TokenIterator(tokens, index)