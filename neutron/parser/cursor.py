"""
Parser position and statement outcome types.

The parser never mutates a shared position. Every parsing function takes a
TokenCursor and returns the node it built together with the cursor just past
it. Statement attempts return a StatementResult that the caller inspects to
decide whether to keep the node or record the error and resynchronise.

Author: xwest
"""

from typing import Optional, Tuple, TYPE_CHECKING
from dataclasses import dataclass, field

from ..lexer.tokens import Token

if TYPE_CHECKING:
    from .ast_nodes import ASTNode
    from .errors import ParseError


@dataclass(frozen=True)
class TokenCursor:
    """Immutable position in a token sequence."""
    tokens: Tuple[Token, ...] = field(repr=False)
    index: int = 0

    def at_end(self) -> bool:
        return self.index >= len(self.tokens)

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Token at the current position (plus offset), or None past the end."""
        index = self.index + offset
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def check(self, lexeme: str) -> bool:
        token = self.peek()
        return token is not None and token.lexeme == lexeme

    def advance(self, count: int = 1) -> 'TokenCursor':
        return TokenCursor(self.tokens, min(self.index + count, len(self.tokens)))

    def previous(self) -> Optional[Token]:
        """The most recently consumed token."""
        return self.peek(-1)

    def last(self) -> Optional[Token]:
        return self.tokens[-1] if self.tokens else None


@dataclass(frozen=True)
class StatementResult:
    """
    Outcome of one statement-parse attempt.

    Exactly one of ``node`` and ``error`` is meaningful on a consumed
    statement; both are None for a skipped fallback statement. ``cursor`` is
    where the attempt stopped (for failures, where the error was detected).
    """
    cursor: TokenCursor
    node: Optional['ASTNode'] = None
    error: Optional['ParseError'] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, node: Optional['ASTNode'], cursor: TokenCursor) -> 'StatementResult':
        return cls(cursor=cursor, node=node)

    @classmethod
    def failure(cls, error: 'ParseError') -> 'StatementResult':
        return cls(cursor=error.cursor, error=error)
