"""Parsing context used by language indexers to walk tokens and record notes."""

from __future__ import annotations

from enum import IntFlag
from typing import Any, Callable, Iterator, Optional, Sequence

from .index import CodeIndex, IndexFile, Note, NoteFlag, NoteKind
from .tokens import Token, TokenBaseKind, TokenFlag, iterator_at_pos


class SkipFlag(IntFlag):
    """How the parse cursor advances after a successful match."""

    NONE = 0
    SKIP_WHITESPACE = 1 << 0


class _Captures(tuple):
    """Captured values of a matched pattern; truthy even when empty."""

    def __bool__(self) -> bool:
        return True


class ParseCtx:
    """A cursor over a file's tokens, tied to the index file being filled."""

    def __init__(
        self,
        index: CodeIndex,
        file: Optional[IndexFile],
        string: str,
        tokens: Sequence[Token],
    ) -> None:
        self.index = index
        self.file = file
        self.string = string
        self.tokens = tokens
        self.it = iterator_at_pos(tokens, 0)
        self.done = False
        self.active_parent: Optional[Note] = None

    def string_from_range(self, range: tuple[int, int]) -> str:
        """Return the text covered by ``range``, clamped to the text."""
        first, one_past_last = range
        first = max(0, first)
        return self.string[first:max(first, one_past_last)]

    def string_from_token(self, token: Token) -> str:
        """Return the text of ``token``."""
        return self.string_from_range(token.range())

    def make_note(
        self, name_range: tuple[int, int], kind: NoteKind, flags: NoteFlag
    ) -> Note:
        """Create a note named by ``name_range`` under the active parent."""
        string = self.string_from_range(name_range)
        return self.index.make_note(
            self.file, self.active_parent, string, name_range, kind, flags
        )

    def push_parent(self, new_parent: Optional[Note]) -> Optional[Note]:
        """Make ``new_parent`` active and return the previously active parent."""
        last_parent = self.active_parent
        self.active_parent = new_parent
        return last_parent

    def pop_parent(self, last_parent: Optional[Note]) -> None:
        """Restore the parent returned by :meth:`push_parent`."""
        self.active_parent = last_parent

    def inc(self, flags: SkipFlag) -> bool:
        """Advance the cursor; return True when the end has been reached."""
        if flags & SkipFlag.SKIP_WHITESPACE:
            self.done = not self.it.inc_non_whitespace()
        else:
            self.done = not self.it.inc_all()
        return self.done

    def _read(self) -> Optional[Token]:
        token = self.it.read()
        if token is None:
            self.done = True
        return token

    def require_token(self, string: str, flags: SkipFlag) -> bool:
        """Consume the current token if its text equals ``string``."""
        token = self._read()
        if token is None or self.string_from_token(token) != string:
            return False
        self.inc(flags)
        return True

    def require_token_kind(
        self, kind: TokenBaseKind, flags: SkipFlag
    ) -> Optional[Token]:
        """Consume and return the current token if it has base ``kind``."""
        token = self._read()
        if token is None or token.kind != kind:
            return None
        self.inc(flags)
        return token

    def require_token_sub_kind(self, sub_kind: int, flags: SkipFlag) -> Optional[Token]:
        """Consume and return the current token if it has ``sub_kind``."""
        token = self._read()
        if token is None or token.sub_kind != sub_kind:
            return None
        self.inc(flags)
        return token

    def peek_token(self, string: str) -> bool:
        """Return whether the current token's text equals ``string``."""
        token = self._read()
        return token is not None and self.string_from_token(token) == string

    def parse_comment(self, token: Token) -> None:
        """Record TODO markers and the first ``@`` tag inside a comment token."""
        string = self.string_from_token(token)
        first, one_past_last = token.range()
        for offset, char in enumerate(string):
            if char == "@":
                self.make_note(
                    (first + offset, one_past_last),
                    NoteKind.COMMENT_TAG,
                    NoteFlag.NONE,
                )
                break
            if offset + 4 < len(string) and string[offset:offset + 4] == "TODO":
                self.make_note(
                    (first + offset, one_past_last),
                    NoteKind.COMMENT_TODO,
                    NoteFlag.NONE,
                )

    def skip_soft_tokens(self, preproc: bool) -> None:
        """Skip tokens up to a statement end, or to the end of a preprocessor body."""
        while not self.done:
            token = self.it.read()
            if token is None:
                break
            if preproc:
                if (
                    not token.flags & TokenFlag.PREPROCESSOR_BODY
                    or token.kind == TokenBaseKind.PREPROCESSOR
                ):
                    break
            elif token.kind in (
                TokenBaseKind.STATEMENT_CLOSE,
                TokenBaseKind.SCOPE_OPEN,
                TokenBaseKind.PARENTHETICAL_OPEN,
            ):
                break
            if not self.it.inc_non_whitespace():
                break

    def skip_op_tokens(self) -> None:
        """Skip operators and anything inside parentheses."""
        paren_nest = 0
        while not self.done:
            token = self.it.read()
            if token is None:
                break
            if token.kind == TokenBaseKind.PARENTHETICAL_OPEN:
                paren_nest += 1
            elif token.kind == TokenBaseKind.PARENTHETICAL_CLOSE:
                paren_nest = max(0, paren_nest - 1)
            elif token.kind != TokenBaseKind.OPERATOR and paren_nest == 0:
                break
            self.inc(SkipFlag.SKIP_WHITESPACE)

    def parse_pattern(self, fmt: str, *args: Any) -> Optional[tuple]:
        """Match a sequence of tokens described by ``fmt``.

        Directives: ``%t`` token text (argument: the text), ``%k`` base kind
        (argument: the kind; captures the token), ``%b`` sub-kind (argument:
        the sub-kind; captures the token), ``%n`` identifier naming an
        existing root note (argument: the note kind; captures the note),
        ``%s`` skip soft tokens, ``%o`` skip operators.

        Returns a tuple of captures, truthy even when empty, or None when the
        pattern does not match; on no match the cursor is restored.
        """
        saved = (self.done, self.it.index, self.active_parent)
        flags = SkipFlag.SKIP_WHITESPACE
        parsed = True
        captures: list[Any] = []
        arg_iter = iter(args)
        directives = [fmt[pos + 1:pos + 2] for pos, char in enumerate(fmt) if char == "%"]

        for directive in directives:
            if directive == "t":
                string = _next_arg(arg_iter, directive)
                parsed = parsed and self.require_token(string, flags)
            elif directive in ("k", "b"):
                kind = _next_arg(arg_iter, directive)
                if parsed:
                    if directive == "k":
                        token = self.require_token_kind(kind, flags)
                    else:
                        token = self.require_token_sub_kind(kind, flags)
                    parsed = token is not None
                    captures.append(token)
            elif directive == "n":
                note_kind = _next_arg(arg_iter, directive)
                if parsed:
                    note = self._require_note(note_kind, flags)
                    parsed = note is not None
                    captures.append(note)
            elif directive == "s":
                self.skip_soft_tokens(False)
            elif directive == "o":
                self.skip_op_tokens()

        if not parsed:
            self.done, self.it.index, self.active_parent = saved
            return None
        return _Captures(captures)

    def _require_note(self, kind: NoteKind, flags: SkipFlag) -> Optional[Note]:
        token = self.require_token_kind(TokenBaseKind.IDENTIFIER, flags)
        if token is None:
            return None
        head = self.index.lookup_note(self.string_from_token(token), None)
        if head is None:
            return None
        return next((note for note in head.duplicates() if note.kind == kind), None)


def _next_arg(arg_iter: Iterator[Any], directive: str) -> Any:
    try:
        return next(arg_iter)
    except StopIteration:
        raise TypeError(f"missing argument for %{directive}") from None


def parse_file(
    index: CodeIndex,
    file: IndexFile,
    text: str,
    tokens: Sequence[Token],
    indexer: Optional[Callable[[ParseCtx], None]],
) -> ParseCtx:
    """Run ``indexer`` over ``tokens`` of ``text`` under the index lock."""
    with index.lock:
        ctx = ParseCtx(index, file, text, tokens)
        if indexer is not None:
            indexer(ctx)
    return ctx