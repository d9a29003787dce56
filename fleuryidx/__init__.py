"""Code indexing, token walking and snippet slots, with a Metadesk lexer and a C/C++ indexer."""

__version__ = "0.1.0"

__all__ = [
    "tokens",
    "index",
    "parse",
    "lang",
    "lego",
    "metadesk",
    "cpp_index",
]