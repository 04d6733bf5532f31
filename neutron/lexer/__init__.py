"""
Neutron Lexer Package

Implements the tokenizer for the Neutron scripting language. Produces a flat,
offset-annotated token list that the parser consumes once per validation.

Key Features:
- Single pass, no backtracking
- Line and block comments skipped (unterminated block comments clamp to EOF)
- Quoted strings with backslash escapes kept verbatim
- `&&` / `||` canonicalized to the `and` / `or` operators
- One fatal condition only: an unterminated string literal

Author: xwest
"""

from .tokens import Token, TokenType, KEYWORDS, TYPE_KEYWORDS, STATEMENT_KEYWORDS
from .lexer import Lexer, tokenize
from .errors import LexerError, NeutronError, SourceDiagnostic

__all__ = [
    "Lexer",
    "tokenize",
    "Token",
    "TokenType",
    "KEYWORDS",
    "TYPE_KEYWORDS",
    "STATEMENT_KEYWORDS",
    "LexerError",
    "NeutronError",
    "SourceDiagnostic",
]
