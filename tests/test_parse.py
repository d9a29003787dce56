import re

import pytest

from fleuryidx.index import CodeIndex, NoteFlag, NoteKind
from fleuryidx.parse import ParseCtx, SkipFlag, parse_file
from fleuryidx.tokens import Token, TokenBaseKind

_PATTERN = re.compile(
    r"(?P<comment>//[^\n]*)|(?P<ws>\s+)|(?P<ident>[A-Za-z_]\w*)|(?P<num>\d+)|(?P<op>::|.)"
)
_GROUP_KINDS = {
    "comment": TokenBaseKind.COMMENT,
    "ws": TokenBaseKind.WHITESPACE,
    "ident": TokenBaseKind.IDENTIFIER,
    "num": TokenBaseKind.LITERAL_INTEGER,
}
_OP_KINDS = {
    "{": TokenBaseKind.SCOPE_OPEN,
    "}": TokenBaseKind.SCOPE_CLOSE,
    "(": TokenBaseKind.PARENTHETICAL_OPEN,
    ")": TokenBaseKind.PARENTHETICAL_CLOSE,
    ";": TokenBaseKind.STATEMENT_CLOSE,
    ",": TokenBaseKind.STATEMENT_CLOSE,
}


def _tokens(text):
    result = []
    for match in _PATTERN.finditer(text):
        group = match.lastgroup
        if group == "op":
            kind = _OP_KINDS.get(match.group(), TokenBaseKind.OPERATOR)
        else:
            kind = _GROUP_KINDS[group]
        result.append(Token(match.start(), match.end() - match.start(), kind))
    result.append(Token(len(text), 0, TokenBaseKind.EOF))
    return result


def _ctx(text, index=None):
    index = index or CodeIndex()
    file = index.lookup_or_make_file(1)
    return ParseCtx(index, file, text, _tokens(text))


def _current(ctx):
    return ctx.string_from_token(ctx.it.read())


def test_require_token_matches_and_advances():
    ctx = _ctx("foo : bar")
    assert ctx.require_token("foo", SkipFlag.SKIP_WHITESPACE) is True
    assert _current(ctx) == ":"
    assert ctx.require_token("bar", SkipFlag.SKIP_WHITESPACE) is False
    assert _current(ctx) == ":"


def test_require_token_without_skip_lands_on_whitespace():
    ctx = _ctx("foo bar")
    assert ctx.require_token("foo", SkipFlag.NONE)
    assert ctx.it.read().kind == TokenBaseKind.WHITESPACE


def test_require_token_kind_returns_token():
    ctx = _ctx("foo ;")
    assert ctx.require_token_kind(TokenBaseKind.STATEMENT_CLOSE, SkipFlag.SKIP_WHITESPACE) is None
    token = ctx.require_token_kind(TokenBaseKind.IDENTIFIER, SkipFlag.SKIP_WHITESPACE)
    assert ctx.string_from_token(token) == "foo"
    assert _current(ctx) == ";"


def test_require_token_sub_kind():
    text = "ab"
    tokens = [Token(0, 2, TokenBaseKind.IDENTIFIER, sub_kind=7), Token(2, 0, TokenBaseKind.EOF)]
    index = CodeIndex()
    ctx = ParseCtx(index, index.lookup_or_make_file(1), text, tokens)
    assert ctx.require_token_sub_kind(3, SkipFlag.NONE) is None
    assert ctx.require_token_sub_kind(7, SkipFlag.NONE) is tokens[0]


def test_peek_does_not_advance():
    ctx = _ctx("x y")
    assert ctx.peek_token("x")
    assert not ctx.peek_token("y")
    assert _current(ctx) == "x"


def test_empty_tokens_mark_done():
    index = CodeIndex()
    ctx = ParseCtx(index, index.lookup_or_make_file(1), "", [])
    assert ctx.require_token("x", SkipFlag.NONE) is False
    assert ctx.done is True


def test_inc_at_end_sets_done():
    ctx = _ctx("a")
    assert ctx.inc(SkipFlag.NONE) is False
    assert ctx.inc(SkipFlag.NONE) is True
    assert ctx.done


def test_parse_pattern_captures_tokens():
    ctx = _ctx("foo : bar")
    captures = ctx.parse_pattern("%k%t%k", TokenBaseKind.IDENTIFIER, ":", TokenBaseKind.IDENTIFIER)
    assert [ctx.string_from_token(token) for token in captures] == ["foo", "bar"]


def test_parse_pattern_with_only_text_is_truthy():
    ctx = _ctx("{ }")
    assert ctx.parse_pattern("%t", "{")
    assert _current(ctx) == "}"


def test_parse_pattern_failure_restores_cursor():
    ctx = _ctx("foo : bar")
    assert ctx.parse_pattern("%k%t", TokenBaseKind.IDENTIFIER, "=") is None
    assert ctx.it.index == 0
    assert ctx.done is False


def test_parse_pattern_missing_argument():
    ctx = _ctx("foo")
    with pytest.raises(TypeError):
        ctx.parse_pattern("%t")


def test_parse_pattern_note_directive():
    index = CodeIndex()
    file = index.lookup_or_make_file(9)
    note = index.make_note(file, None, "Foo", (0, 3), NoteKind.TYPE, NoteFlag.NONE)
    ctx = _ctx("Foo :: x", index)
    assert ctx.parse_pattern("%n%t", NoteKind.FUNCTION, "::") is None
    assert ctx.it.index == 0
    captures = ctx.parse_pattern("%n%t", NoteKind.TYPE, "::")
    assert captures[0] is note
    assert _current(ctx) == "x"


def test_parse_pattern_skips_operators():
    ctx = _ctx("int * * name ;")
    captures = ctx.parse_pattern(
        "%k%o%k%t", TokenBaseKind.IDENTIFIER, TokenBaseKind.IDENTIFIER, ";"
    )
    assert [ctx.string_from_token(token) for token in captures] == ["int", "name"]


def test_parse_comment_records_todo_and_tag():
    ctx = _ctx("// TODO fix @tag")
    ctx.parse_comment(ctx.it.read())
    assert [(note.kind, note.string) for note in ctx.file.notes] == [
        (NoteKind.COMMENT_TODO, "TODO fix @tag"),
        (NoteKind.COMMENT_TAG, "@tag"),
    ]


def test_parent_stack_nests_notes():
    ctx = _ctx("outer inner")
    outer = ctx.make_note((0, 5), NoteKind.TYPE, NoteFlag.NONE)
    last = ctx.push_parent(outer)
    inner = ctx.make_note((6, 11), NoteKind.DECL, NoteFlag.NONE)
    ctx.pop_parent(last)
    assert last is None
    assert ctx.active_parent is None
    assert inner.parent is outer
    assert outer.children == [inner]
    assert ctx.file.notes == [outer]


def test_skip_op_tokens_passes_parentheses():
    ctx = _ctx("( a ) b")
    ctx.skip_op_tokens()
    assert _current(ctx) == "b"


def test_skip_soft_tokens_stops_at_statement_close():
    ctx = _ctx("a b ; c")
    ctx.skip_soft_tokens(False)
    assert _current(ctx) == ";"


def test_parse_file_runs_indexer():
    index = CodeIndex()
    file = index.lookup_or_make_file(3)
    text = "a ; b"

    def indexer(ctx):
        while not ctx.done:
            token = ctx.require_token_kind(TokenBaseKind.IDENTIFIER, SkipFlag.SKIP_WHITESPACE)
            if token is not None:
                ctx.make_note(token.range(), NoteKind.DECL, NoteFlag.NONE)
            else:
                ctx.inc(SkipFlag.SKIP_WHITESPACE)

    ctx = parse_file(index, file, text, _tokens(text), indexer)
    assert ctx.done
    assert [note.string for note in file.notes] == ["a", "b"]
    assert index.lookup_note("b").kind == NoteKind.DECL