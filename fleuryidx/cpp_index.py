"""Indexing and positional context for C and C++ source."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Sequence

from .index import CodeIndex, NoteFlag, NoteKind
from .lang import PosContextData, push_call_context
from .parse import ParseCtx, SkipFlag
from .tokens import Token, TokenBaseKind, iterator_at_pos

_SKIP = SkipFlag.SKIP_WHITESPACE
_NO_SKIP = SkipFlag.NONE


class CppKind(IntEnum):
    """C++ token sub-kinds that the indexer and context finder look at."""

    NULL = 0
    PP_DEFINE = 1
    SEMICOLON = 2
    COMMA = 3
    PAREN_OP = 4
    PAREN_CL = 5
    BRACE_OP = 6
    BRACE_CL = 7
    DOT = 8
    ARROW = 9
    COLON_COLON = 10


def _text_of(text: str, token: Token) -> str:
    return text[token.pos:token.pos + token.size]


def parse_macro_definition(ctx: ParseCtx) -> None:
    """Record the macro named after ``#define`` and skip the macro body."""
    captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
    if captures is None:
        return
    (name,) = captures
    last_parent = ctx.push_parent(None)
    ctx.make_note(name.range(), NoteKind.MACRO, NoteFlag.NONE)
    ctx.pop_parent(last_parent)
    ctx.skip_soft_tokens(True)


def skip_parse_body(ctx: ParseCtx) -> bool:
    """Skip a brace-enclosed body, indexing comments and macros inside it.

    Returns whether a body was found at the cursor.
    """
    body_found = False
    nest = 0
    while not ctx.done:
        comment = ctx.parse_pattern("%k", TokenBaseKind.COMMENT)
        if comment is not None:
            ctx.parse_comment(comment[0])
        elif ctx.parse_pattern("%b", CppKind.PP_DEFINE) is not None:
            parse_macro_definition(ctx)
        elif ctx.parse_pattern("%t", "{") is not None:
            nest += 1
            body_found = True
        elif ctx.parse_pattern("%t", "}") is not None:
            nest -= 1
            if nest == 0:
                break
        elif not body_found:
            break
        else:
            ctx.inc(_SKIP)
    return body_found


def parse_decl(ctx: ParseCtx) -> Optional[Token]:
    """Match ``Type name;`` or ``Type name =`` and return the name token."""
    patterns = (
        ("%k%o%k%o%t", TokenBaseKind.IDENTIFIER, ";"),
        ("%k%o%k%o%t", TokenBaseKind.KEYWORD, ";"),
        ("%k%o%k%t", TokenBaseKind.IDENTIFIER, "="),
        ("%k%o%k%t", TokenBaseKind.KEYWORD, "="),
    )
    for fmt, base_kind, terminator in patterns:
        captures = ctx.parse_pattern(
            fmt, base_kind, TokenBaseKind.IDENTIFIER, terminator
        )
        if captures is not None:
            return captures[1]
    return None


def parse_struct_or_union_body(ctx: ParseCtx, flags: NoteFlag) -> None:
    """Record a struct or union type named before or after its body."""
    flags = NoteFlag(flags)
    name: Optional[Token] = None
    need_end_name = False

    captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
    if captures is not None:
        name = captures[0]
    else:
        need_end_name = True

    if not skip_parse_body(ctx):
        flags |= NoteFlag.PROTOTYPE

    if need_end_name:
        captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
        if captures is not None:
            name = captures[0]

    if name is not None:
        ctx.make_note(name.range(), NoteKind.TYPE, flags)


def parse_function_body(ctx: ParseCtx) -> tuple[bool, bool]:
    """Scan past a parameter list to a ``;`` or a body.

    Returns ``(valid, prototype)``; a body that follows is skipped.
    """
    valid = False
    prototype = False
    while not ctx.done:
        token = ctx.it.read()
        if token is None:
            break
        if token.sub_kind == CppKind.SEMICOLON:
            valid = True
            prototype = True
            break
        if token.kind == TokenBaseKind.SCOPE_OPEN:
            valid = True
            break
        ctx.inc(_NO_SKIP)

    if valid and not prototype:
        skip_parse_body(ctx)
    return valid, prototype


def parse_enum_body(ctx: ParseCtx) -> None:
    """Record the constants of an enum body at the cursor."""
    if ctx.parse_pattern("%t", "{") is None:
        return
    while not ctx.done:
        captures = ctx.parse_pattern("%k%t", TokenBaseKind.IDENTIFIER, ",")
        if captures is not None:
            ctx.make_note(captures[0].range(), NoteKind.CONSTANT, NoteFlag.NONE)
            continue
        captures = ctx.parse_pattern("%k%t", TokenBaseKind.IDENTIFIER, "=")
        if captures is not None:
            ctx.make_note(captures[0].range(), NoteKind.CONSTANT, NoteFlag.NONE)
            _skip_enum_value(ctx)
            continue
        captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
        if captures is not None:
            ctx.make_note(captures[0].range(), NoteKind.CONSTANT, NoteFlag.NONE)
        elif ctx.parse_pattern("%t", "}") is not None:
            break
        else:
            ctx.inc(_NO_SKIP)


def _skip_enum_value(ctx: ParseCtx) -> None:
    while not ctx.done:
        token = ctx.it.read()
        if token is None:
            break
        if token.kind == TokenBaseKind.STATEMENT_CLOSE:
            ctx.inc(_NO_SKIP)
            break
        if token.kind in (TokenBaseKind.SCOPE_CLOSE, TokenBaseKind.SCOPE_OPEN):
            break
        ctx.inc(_NO_SKIP)


def _parse_typedef_enum(ctx: ParseCtx, name: Optional[Token], allow_end_name: bool) -> None:
    prototype = ctx.parse_pattern("%t", ";") is not None
    if not prototype:
        parse_enum_body(ctx)
    if allow_end_name and name is None:
        captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
        if captures is not None:
            name = captures[0]
    if name is not None:
        flags = NoteFlag.PROTOTYPE if prototype else NoteFlag.NONE
        ctx.make_note(name.range(), NoteKind.TYPE, flags)


def _parse_pure_typedef(ctx: ParseCtx) -> None:
    nest = 0
    sum_type = False
    name: Optional[Token] = None
    while not ctx.done:
        if ctx.parse_pattern("%t", "(") is not None:
            nest += 1
            continue
        if nest == 0:
            captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
            if captures is not None:
                name = captures[0]
                named = ctx.index.lookup_note(ctx.string_from_token(name), None)
                if (
                    named is not None
                    and named.kind == NoteKind.TYPE
                    and named.flags & NoteFlag.SUM_TYPE
                ):
                    sum_type = True
                continue
        if ctx.parse_pattern("%t", ";") is not None:
            break
        ctx.inc(_NO_SKIP)
    if name is not None:
        flags = NoteFlag.SUM_TYPE if sum_type else NoteFlag.NONE
        ctx.make_note(name.range(), NoteKind.TYPE, flags)


def _match_function_head(ctx: ParseCtx) -> Optional[Token]:
    for base_kind in (TokenBaseKind.IDENTIFIER, TokenBaseKind.KEYWORD):
        captures = ctx.parse_pattern(
            "%k%o%k%t", base_kind, TokenBaseKind.IDENTIFIER, "("
        )
        if captures is not None:
            return captures[1]
    return None


def _match_member_function_head(ctx: ParseCtx) -> Optional[Token]:
    for base_kind in (TokenBaseKind.IDENTIFIER, TokenBaseKind.KEYWORD):
        captures = ctx.parse_pattern(
            "%k%o%n%t%k%t",
            base_kind,
            NoteKind.TYPE,
            "::",
            TokenBaseKind.IDENTIFIER,
            "(",
        )
        if captures is not None:
            return captures[2]
    return None


def index_file(ctx: ParseCtx) -> None:
    """Record types, functions, declarations, macros and comment tags."""
    scope_nest = 0
    while not ctx.done:
        if ctx.parse_pattern("%t%t%t", "extern", "C", "{") is not None:
            continue
        if ctx.parse_pattern("%t", "{") is not None:
            scope_nest += 1
            continue
        if ctx.parse_pattern("%t", "}") is not None:
            scope_nest = max(0, scope_nest - 1)
            continue

        if ctx.parse_pattern("%t", "struct") is not None:
            parse_struct_or_union_body(ctx, NoteFlag.PRODUCT_TYPE)
            continue
        if ctx.parse_pattern("%t%t", "typedef", "struct") is not None:
            parse_struct_or_union_body(ctx, NoteFlag.NONE)
            captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
            if captures is not None:
                ctx.make_note(captures[0].range(), NoteKind.TYPE, NoteFlag.PRODUCT_TYPE)
            continue

        if ctx.parse_pattern("%t", "union") is not None:
            parse_struct_or_union_body(ctx, NoteFlag.SUM_TYPE)
            continue
        if ctx.parse_pattern("%t%t", "typedef", "union") is not None:
            parse_struct_or_union_body(ctx, NoteFlag.SUM_TYPE)
            captures = ctx.parse_pattern("%k", TokenBaseKind.IDENTIFIER)
            if captures is not None:
                ctx.make_note(captures[0].range(), NoteKind.TYPE, NoteFlag.SUM_TYPE)
            continue

        captures = ctx.parse_pattern(
            "%t%t%k", "typedef", "enum", TokenBaseKind.IDENTIFIER
        )
        if captures is not None:
            _parse_typedef_enum(ctx, captures[0], allow_end_name=False)
            continue
        if ctx.parse_pattern("%t%t", "typedef", "enum") is not None:
            _parse_typedef_enum(ctx, None, allow_end_name=True)
            continue

        captures = ctx.parse_pattern("%t%k", "enum", TokenBaseKind.IDENTIFIER)
        if captures is not None:
            _parse_typedef_enum(ctx, captures[0], allow_end_name=False)
            continue
        if ctx.parse_pattern("%t", "enum") is not None:
            _parse_typedef_enum(ctx, None, allow_end_name=False)
            continue

        if ctx.parse_pattern("%t", "typedef") is not None:
            _parse_pure_typedef(ctx)
            continue

        if scope_nest == 0:
            name = _match_function_head(ctx)
            if name is not None:
                valid, prototype = parse_function_body(ctx)
                if valid:
                    flags = NoteFlag.PROTOTYPE if prototype else NoteFlag.NONE
                    ctx.make_note(name.range(), NoteKind.FUNCTION, flags)
                continue

            name = _match_member_function_head(ctx)
            if name is not None:
                valid, prototype = parse_function_body(ctx)
                if valid:
                    flags = NoteFlag.PRODUCT_TYPE if prototype else NoteFlag.NONE
                    ctx.make_note(name.range(), NoteKind.FUNCTION, flags)
                continue

            name = parse_decl(ctx)
            if name is not None:
                ctx.make_note(name.range(), NoteKind.DECL, NoteFlag.NONE)
                continue

        comment = ctx.parse_pattern("%k", TokenBaseKind.COMMENT)
        if comment is not None:
            ctx.parse_comment(comment[0])
            continue

        if ctx.parse_pattern("%b", CppKind.PP_DEFINE) is not None:
            parse_macro_definition(ctx)
            continue

        ctx.inc(_NO_SKIP)


def pos_context(
    index: CodeIndex, text: str, tokens: Sequence[Token], pos: int
) -> list[PosContextData]:
    """Find up to four enclosing calls around ``pos``, innermost first."""
    contexts: list[PosContextData] = []
    it = iterator_at_pos(tokens, pos)
    count = 0
    paren_nest = 0
    arg_idx = 0
    step = 0
    while count < 4:
        token = it.read()
        if token is None:
            break
        if (
            paren_nest == 0
            and token.sub_kind == CppKind.PAREN_OP
            and it.dec_non_whitespace()
        ):
            name = it.read()
            if name is not None and name.kind == TokenBaseKind.IDENTIFIER:
                push_call_context(index, contexts, _text_of(text, name), arg_idx)
                count += 1
                arg_idx = 0
        elif token.sub_kind == CppKind.PAREN_OP:
            paren_nest -= 1
        elif token.sub_kind == CppKind.PAREN_CL and step > 0:
            paren_nest += 1
        elif token.sub_kind == CppKind.COMMA and step > 0 and paren_nest == 0:
            arg_idx += 1
        if not it.dec_non_whitespace():
            break
        step += 1
    return contexts