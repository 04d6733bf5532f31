"""
Neutron language front-end

Tokenizer, error-tolerant parser and shallow type checker for the Neutron
scripting language, plus the validation pipeline that turns their output
into editor diagnostics.

    from neutron import validate_text
    for diagnostic in validate_text(source):
        print(diagnostic)

Author: xwest
"""

__version__ = "0.1.0"

from .lexer import Lexer, Token, TokenType, LexerError, tokenize
from .parser import Parser, Program, ParseError, parse
from .analyzer import TypeChecker, SemanticError, TypeTag
from .diagnostics import Diagnostic, DiagnosticSeverity, Position, Range, offset_to_position
from .validation import ValidationSettings, DocumentValidator, validate_text

__all__ = [
    "__version__",
    "Lexer", "Token", "TokenType", "LexerError", "tokenize",
    "Parser", "Program", "ParseError", "parse",
    "TypeChecker", "SemanticError", "TypeTag",
    "Diagnostic", "DiagnosticSeverity", "Position", "Range", "offset_to_position",
    "ValidationSettings", "DocumentValidator", "validate_text",
]
