# fleuryidx

A small code-intelligence library for text editors. It works on lists of
tokens: it indexes the names a file defines (types, functions, constants,
declarations, macros, comment tags and TODOs) and answers "which call is the
cursor inside, and on which argument?" for a position.

What is included:

- `fleuryidx.tokens`: `Token`, `TokenBaseKind`, `TokenFlag`, and
  `TokenIterator` for walking a token list forward or backward, skipping
  whitespace tokens when asked (`iterator_at_pos`, `iterator_at_index`,
  `token_index_from_pos`).
- `fleuryidx.index`: `CodeIndex`, `IndexFile`, `Note`, `NoteKind`, `NoteFlag`.
- `fleuryidx.parse`: `ParseCtx`, a cursor for indexers with token matching
  and a small pattern language, and `parse_file`.
- `fleuryidx.lang`: `Language`, `LanguageRegistry`, `PosContextData`.
- `fleuryidx.metadesk`: a lexer, an indexer and a `Language` for Metadesk.
- `fleuryidx.cpp_index`: an indexer and a position-context finder for C/C++.
- `fleuryidx.lego`: numbered snippet slots bound to function keys.

No third-party dependencies; Python 3.10 or later.

## Install

```
pip install fleuryidx
```

## Lexing Metadesk

```python
from fleuryidx import metadesk

tokens = metadesk.lex("@doc foo: { bar, baz }")
for token in tokens:
    print(token.kind.name, token.range(), token.sub_kind)
```

The last token is always `TokenBaseKind.EOF`. `@name` tags are identifiers
with sub-kind `MdTokenSubKind.TAG`. `MdLexer(text).lex_full_input(tokens,
max_count)` lexes in chunks: it appends up to `max_count` tokens and returns
True once the EOF token has been added.

## Indexing

```python
from fleuryidx import metadesk
from fleuryidx.index import CodeIndex, NoteKind
from fleuryidx.parse import parse_file

text = "width: 640\nheight: 480 // TODO: make configurable"
index = CodeIndex()
file = index.lookup_or_make_file(1)
parse_file(index, file, text, metadesk.lex(text), metadesk.index_file)

note = index.lookup_note("width")
print(note.kind is NoteKind.CONSTANT, note.range)   # True (0, 5)
print([n.string for n in file.notes])
```

Notes are kept per file (`IndexFile.notes`, with `Note.children` for nested
notes) and in a global table by name. Notes sharing a name form a duplicate
chain, walked with `Note.next`, `Note.prev` or `Note.duplicates()`.
`CodeIndex.clear_file` drops a file's notes and bumps its `generation`;
`CodeIndex.erase_file` forgets the file. `CodeIndex.lock` is a re-entrant
lock that `parse_file` holds while indexing.

### Writing an indexer

An indexer is a function taking a `ParseCtx`. Besides `require_token`,
`require_token_kind`, `require_token_sub_kind`, `peek_token`, `inc` and
`make_note`, it can match token sequences with `parse_pattern`:

| directive | argument       | captures                       |
|-----------|----------------|--------------------------------|
| `%t`      | token text     | nothing                        |
| `%k`      | base kind      | the token                      |
| `%b`      | sub-kind       | the token                      |
| `%n`      | note kind      | an existing root note by name  |
| `%s`      | none           | skips to a statement end       |
| `%o`      | none           | skips operators and parens     |

`parse_pattern` returns a tuple of captures (truthy even when empty) or
None; on no match the cursor is put back where it was.

```python
from fleuryidx.tokens import TokenBaseKind

match = ctx.parse_pattern("%k%t", TokenBaseKind.IDENTIFIER, ":")
if match is not None:
    (name,) = match
```

`parse_comment` records a `COMMENT_TAG` note at the first `@` in a comment
and a `COMMENT_TODO` note for each `TODO` before it.

## C and C++

`cpp_index.index_file` records structs, unions, enums and their constants,
typedefs, functions and member functions (with `PROTOTYPE` for
declarations without a body), top-level declarations, `#define` macros and
comment tags. `cpp_index.pos_context(index, text, tokens, pos)` returns up to
four enclosing calls around `pos`, innermost first, each as a
`PosContextData` with the indexed note of the called name and the argument
index.

These functions read token base kinds and the sub-kinds in `CppKind`
(`PP_DEFINE`, `SEMICOLON`, `COMMA`, `PAREN_OP`, `PAREN_CL`, ...).

## Languages

```python
from fleuryidx import metadesk
from fleuryidx.lang import LanguageRegistry, file_extension

registry = LanguageRegistry()
registry.register(metadesk.make_language())        # registered as "mdesk"

language = registry.from_file_name("data/config.mdesk")
tokens = language.lex("a: 1")
```

A `Language` bundles `make_lexer`, `index_file` and `pos_context`. The first
registration of a name wins. `push_call_context` and `push_dot_context` help
position-context functions build their result lists.

## Legos

```python
from fleuryidx.lego import LegoBoard, LegoKind

board = LegoBoard()
lego = board.from_function_key(1)       # F1; F1..F24 map onto slots 0..3
lego.store(LegoKind.STRING, "hello")
new_text, inserted = lego.place("say  now", 4)
# new_text == "say hello now", inserted == (4, 9)
```

`place` raises `ValueError` for a position outside the text.

## What this package does not do

- It has no C/C++ lexer. `cpp_index` works on tokens you supply, with base
  kinds from `TokenBaseKind` and sub-kinds from `CppKind`; there is no
  `Language` for C/C++ to register.
- Metadesk is the only language with a lexer here, and its
  `pos_context` always returns an empty list.
- There is no editor integration: no rendering, highlighting, commands,
  key bindings or buffer management. Buffers are identified by plain
  integers, and the index lives only in memory.