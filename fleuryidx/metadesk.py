"""Lexer, indexer and language description for Metadesk files."""

from __future__ import annotations

import string as _string
import sys
from enum import IntEnum
from typing import Sequence

from .index import CodeIndex, NoteFlag, NoteKind
from .lang import Language, PosContextData
from .parse import ParseCtx, SkipFlag
from .tokens import Token, TokenBaseKind

_ALPHA = frozenset(_string.ascii_letters + "_")
_ALNUM = frozenset(_string.ascii_letters + _string.digits + "_")
_NUMBER_BODY = _ALNUM | frozenset(".")
_WHITESPACE = frozenset(" \n\r\t\f\v")
_SYMBOLS = frozenset("~!@#$%^&*()-=+[]{}:;,<.>/?|\\")


class MdTokenSubKind(IntEnum):
    """Metadesk-specific token sub-kinds."""

    NULL = 0
    TAG = 1


def char_is_symbol(c: str) -> bool:
    """Return whether ``c`` is one of the Metadesk symbol characters."""
    return len(c) == 1 and c in _SYMBOLS


class MdLexer:
    """Incremental lexer over one piece of Metadesk text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.finished = False

    def lex_full_input(self, tokens: list[Token], max_count: int) -> bool:
        """Append tokens to ``tokens``; True once the EOF token has been added.

        Stops early, returning False, after ``max_count`` tokens.
        """
        if self.finished:
            return True
        length = len(self.text)
        emitted = 0
        while self.pos < length:
            token = self._next_token(self.pos)
            tokens.append(token)
            self.pos = token.pos + token.size
            emitted += 1
            if emitted >= max_count:
                return False
        tokens.append(Token(length, 1, TokenBaseKind.EOF))
        self.finished = True
        return True

    def _run_end(self, start: int, chars: frozenset) -> int:
        text = self.text
        end = start
        while end < len(text) and text[end] in chars:
            end += 1
        return end

    def _next_token(self, i: int) -> Token:
        text = self.text
        length = len(text)
        chr_ = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if chr_ == "/" and nxt == "/":
            end = text.find("\n", i + 2)
            if end < 0:
                end = length
            return Token(i, end - i, TokenBaseKind.COMMENT)

        if chr_ == "/" and nxt == "*":
            j = i + 2
            while j + 1 < length and not (text[j] == "*" and text[j + 1] == "/"):
                j += 1
            return Token(i, j - i + 2, TokenBaseKind.COMMENT)

        if chr_ in _ALPHA:
            end = self._run_end(i + 1, _ALNUM)
            return Token(i, end - i, TokenBaseKind.IDENTIFIER)

        if chr_ in _WHITESPACE:
            end = self._run_end(i + 1, _WHITESPACE)
            return Token(i, end - i, TokenBaseKind.WHITESPACE)

        if "0" <= chr_ <= "9":
            end = self._run_end(i + 1, _NUMBER_BODY)
            return Token(i, end - i, TokenBaseKind.LITERAL_FLOAT)

        if chr_ in ('"', "'"):
            end = text.find(chr_, i + 1)
            if end < 0:
                end = length
            # The closing quote is counted even when the text ends first.
            return Token(i, end - i + 1, TokenBaseKind.LITERAL_STRING)

        if chr_ == "`":
            return Token(i, 1, TokenBaseKind.LITERAL_STRING)

        if chr_ == "@":
            end = self._run_end(i + 1, _ALNUM)
            return Token(i, end - i, TokenBaseKind.IDENTIFIER, int(MdTokenSubKind.TAG))

        if chr_ == "{":
            return Token(i, 1, TokenBaseKind.SCOPE_OPEN)
        if chr_ == "}":
            return Token(i, 1, TokenBaseKind.SCOPE_CLOSE)
        if chr_ in "([":
            return Token(i, 1, TokenBaseKind.PARENTHETICAL_OPEN)
        if chr_ in ")]":
            return Token(i, 1, TokenBaseKind.PARENTHETICAL_CLOSE)
        if chr_ in ",;" or (chr_ == "-" and nxt == ">"):
            return Token(i, 1, TokenBaseKind.STATEMENT_CLOSE)
        if char_is_symbol(chr_):
            return Token(i, 1, TokenBaseKind.OPERATOR)
        return Token(i, 1, TokenBaseKind.LEX_ERROR)


def lex(text: str) -> list[Token]:
    """Lex the whole of ``text``; the last token is always EOF."""
    tokens: list[Token] = []
    MdLexer(text).lex_full_input(tokens, sys.maxsize)
    return tokens


def index_file(ctx: ParseCtx) -> None:
    """Record ``name:`` definitions as constants and comment tags."""
    flags = SkipFlag.SKIP_WHITESPACE
    while not ctx.done:
        name = ctx.require_token_kind(TokenBaseKind.IDENTIFIER, flags)
        if name is not None:
            if ctx.require_token(":", flags):
                ctx.make_note(name.range(), NoteKind.CONSTANT, NoteFlag.NONE)
            continue
        comment = ctx.require_token_kind(TokenBaseKind.COMMENT, flags)
        if comment is not None:
            ctx.parse_comment(comment)
        else:
            ctx.inc(flags)


def pos_context(
    index: CodeIndex, text: str, tokens: Sequence[Token], pos: int
) -> list[PosContextData]:
    """Metadesk has no positional context; always an empty list."""
    return []


def make_language() -> Language:
    """Return the language description for Metadesk files."""
    return Language(
        name="mdesk",
        make_lexer=MdLexer,
        index_file=index_file,
        pos_context=pos_context,
    )