"""Language descriptions and the registry that finds them by name."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .index import CodeIndex, Note
from .tokens import Token


@dataclass
class PosContextData:
    """Context found around a position: a called function or an accessed type."""

    relevant_note: Optional[Note] = None
    query_token: Optional[Token] = None
    argument_index: int = 0


@dataclass
class Language:
    """A language: its lexer, indexer and position-context finder.

    ``make_lexer(text)`` returns a lexer whose ``lex_full_input(tokens,
    max_count)`` appends tokens to ``tokens`` and returns True once the
    end of input has been reached. ``index_file(ctx)`` fills the index from
    a :class:`~fleuryidx.parse.ParseCtx`. ``pos_context(index, text, tokens,
    pos)`` returns a list of :class:`PosContextData`.
    """

    name: str
    make_lexer: Callable[[str], Any]
    index_file: Optional[Callable[[Any], None]] = None
    pos_context: Optional[Callable[[CodeIndex, str, list, int], list]] = None

    def lex(self, text: str) -> list[Token]:
        """Lex the whole of ``text`` in one pass and return the tokens."""
        tokens: list[Token] = []
        lexer = self.make_lexer(text)
        lexer.lex_full_input(tokens, sys.maxsize)
        return tokens


class LanguageRegistry:
    """Languages registered by name; the first registration of a name wins."""

    def __init__(self) -> None:
        self._languages: dict[str, Language] = {}

    def register(self, language: Language) -> Language:
        """Add ``language`` unless its name is taken; return the registered one."""
        return self._languages.setdefault(language.name, language)

    def from_string(self, name: str) -> Optional[Language]:
        """Return the language registered as ``name``."""
        return self._languages.get(name)

    def from_file_name(self, file_name: str) -> Optional[Language]:
        """Return the language named by the extension of ``file_name``."""
        return self.from_string(file_extension(file_name))


def file_extension(file_name: str) -> str:
    """Return the text after the last dot, or the whole name when there is none."""
    return file_name[file_name.rfind(".") + 1:]


def push_call_context(
    index: CodeIndex, contexts: list[PosContextData], name: str, arg_index: int
) -> PosContextData:
    """Append the context of a call to ``name`` at argument ``arg_index``."""
    data = PosContextData(index.lookup_note(name, None), None, arg_index)
    contexts.append(data)
    return data


def push_dot_context(
    index: CodeIndex, contexts: list[PosContextData], name: str, query: Optional[Token]
) -> PosContextData:
    """Append the context of a member access on the type ``name``."""
    data = PosContextData(index.lookup_note(name, None), query, 0)
    contexts.append(data)
    return data