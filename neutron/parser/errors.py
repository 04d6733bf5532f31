"""
Error handling for the Neutron parser.

Syntax errors never escape the parser. Structural failures inside a statement
are turned into a failed statement outcome at the statement boundary, the
error is recorded on the Program, and the parser resynchronises at the next
statement boundary so one malformed statement cannot poison the rest of the
document. Missing statement terminators are softer still: they are recorded
but the statement's node is kept.

Author: xwest
"""

from typing import Optional, TYPE_CHECKING

from ..lexer.tokens import Token, STATEMENT_KEYWORDS
from ..lexer.errors import NeutronError

if TYPE_CHECKING:
    from .cursor import TokenCursor


class ParseError(NeutronError):
    """
    A syntax error detected by the parser.

    ``token`` is the offending token (None only for a document without any
    tokens) and ``cursor`` is the parser position at which the failure was
    detected, which is where recovery starts from.
    """

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        token: Optional[Token] = None,
        cursor: Optional['TokenCursor'] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message, start, end, code=code, help_text=help_text)
        self.token = token
        self.cursor = cursor

    def to_dict(self) -> dict:
        return {"message": self.message, "start": self.start, "end": self.end}


class SyntaxErrorRecovery:
    """
    Utilities for error recovery in the parser.

    Recovery is panic-mode: skip tokens until something that looks like a
    statement boundary shows up.
    """

    # Block delimiters are left in place for the enclosing statement list
    BLOCK_DELIMITERS = frozenset({"{", "}"})

    @staticmethod
    def is_statement_start(token: Token) -> bool:
        """Check if a token can begin a new statement."""
        if token.is_identifier:
            return True
        return token.is_keyword and token.lexeme in STATEMENT_KEYWORDS

    @staticmethod
    def synchronize(cursor: 'TokenCursor') -> 'TokenCursor':
        """
        Skip forward to the next recovery point.

        A ``;`` is consumed and treated as the recovery point. Block
        delimiters and tokens that start a new statement are left unconsumed.
        """
        while not cursor.at_end():
            token = cursor.peek()
            if token.lexeme == ";":
                return cursor.advance()
            if token.lexeme in SyntaxErrorRecovery.BLOCK_DELIMITERS:
                return cursor
            if SyntaxErrorRecovery.is_statement_start(token):
                return cursor
            cursor = cursor.advance()
        return cursor


def _error_token(cursor: 'TokenCursor') -> Optional[Token]:
    # At end of input errors point at the last token of the document
    token = cursor.peek()
    return token if token is not None else cursor.last()


def _make_error(message: str, cursor: 'TokenCursor', code: str,
                help_text: Optional[str] = None) -> ParseError:
    token = _error_token(cursor)
    start, end = (token.start, token.end) if token is not None else (0, 0)
    return ParseError(message, start, end, token=token, cursor=cursor,
                      code=code, help_text=help_text)


def create_unexpected_token_error(cursor: 'TokenCursor') -> ParseError:
    """Create an error for a token that cannot start an expression."""
    if cursor.at_end():
        return _make_error(
            "Unexpected end of input", cursor, "P010",
            help_text="The file ended in the middle of an expression."
        )
    return _make_error(f"Unexpected token '{cursor.peek().lexeme}'", cursor, "P001")


def create_missing_token_error(message: str, cursor: 'TokenCursor') -> ParseError:
    """Create an error for a structurally required token that is not there."""
    code = "P010" if cursor.at_end() else "P002"
    return _make_error(message, cursor, code)


def create_missing_semicolon_error(what: str, start: int, end: int) -> ParseError:
    """
    Create the soft missing-semicolon error.

    ``what`` names the statement kind ("variable declaration", "statement",
    "assignment"); the range runs from the statement's end to the end of
    its source line.
    """
    return ParseError(
        message=f"Missing semicolon at end of {what}",
        start=start,
        end=end,
        code="P003",
        help_text="Add a semicolon ';' to end the statement"
    )
