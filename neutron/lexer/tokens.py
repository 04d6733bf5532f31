"""
Token definitions for the Neutron lexer.

Neutron has a deliberately small token vocabulary: every token is one of six
kinds (numbers, strings, identifiers, keywords, operators and single-character
symbols) and carries the character offsets it was read from, so later stages
can point diagnostics at exact source ranges.

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass


class TokenType(Enum):
    """Enumeration of all token kinds in Neutron."""

    NUMBER = auto()                 # 42, 3.14 (lenient: 1.2.3 is one token)
    STRING = auto()                 # "hello", 'world' (quotes included in lexeme)
    IDENTIFIER = auto()             # name, _tmp, $el
    KEYWORD = auto()                # var, if, fun, int, nil, ...
    OPERATOR = auto()               # ==, !=, >=, <=, and (&&), or (||)
    SYMBOL = auto()                 # ( ) { } [ ] , ; . = + - * / % < > : ...


@dataclass(frozen=True)
class Token:
    """
    A lexical token.

    ``start`` and ``end`` are character offsets into the original source
    (``end`` is exclusive), so ``source[start:end]`` is the token's text for
    every token except the canonicalised ``&&``/``||`` operators.
    """
    type: TokenType
    lexeme: str
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.lexeme!r}, {self.start}, {self.end})"

    @property
    def is_keyword(self) -> bool:
        return self.type == TokenType.KEYWORD

    @property
    def is_identifier(self) -> bool:
        return self.type == TokenType.IDENTIFIER


# Reserved words. Any identifier-shaped lexeme in this set becomes a KEYWORD.
KEYWORDS = frozenset({
    # Declarations and types
    "var", "int", "float", "string", "bool", "array", "object", "any",
    # Control flow
    "if", "elif", "else", "while", "for", "return", "break", "continue",
    # Functions and classes
    "class", "fun", "this", "new",
    # Word operators
    "and", "or", "not", "in",
    # Pattern matching
    "match", "case", "default",
    # Modules
    "use", "using",
    # Literals
    "true", "false", "nil",
})

# Keywords accepted as the declared type in ``var <type> name``
TYPE_KEYWORDS = frozenset({"int", "float", "string", "bool", "array", "object", "any"})

# Keywords that open a statement; used for dispatch and error recovery
STATEMENT_KEYWORDS = frozenset({"var", "if", "while", "for", "fun", "class", "return"})

# Two-character operators, mapped to the lexeme the token carries
TWO_CHAR_OPERATORS = {
    "==": "==",
    "!=": "!=",
    ">=": ">=",
    "<=": "<=",
    "&&": "and",
    "||": "or",
}

IDENTIFIER_START_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_$"
)
IDENTIFIER_CHARS = IDENTIFIER_START_CHARS | frozenset("0123456789")
DIGITS = frozenset("0123456789")
NUMBER_CHARS = DIGITS | frozenset(".")
QUOTES = frozenset("\"'")
