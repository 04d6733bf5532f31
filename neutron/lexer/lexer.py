"""
Neutron Lexer - turns source text into a flat token list

Single left-to-right pass, no backtracking. The only thing that can stop it is
a string literal that never closes; everything else (stray characters, a
block comment running off the end of the file) is tokenized as best we can and
left for the parser to complain about.

Numbers are scanned leniently on purpose: `[0-9][0-9.]*`, so `1.2.3` comes
out as one NUMBER token and `1e5` is NUMBER `1` followed by IDENTIFIER `e5`.
Editors already show those files without diagnostics and tightening this
would suddenly flag them.

xwest
"""

import logging
from typing import List

from .tokens import (
    Token, TokenType, KEYWORDS, TWO_CHAR_OPERATORS,
    IDENTIFIER_START_CHARS, IDENTIFIER_CHARS, DIGITS, NUMBER_CHARS, QUOTES
)
from .errors import create_unterminated_string_error


logger = logging.getLogger(__name__)


class Lexer:
    """
    Neutron lexical analyzer.

    Converts source text into a list of tokens with character offsets.
    Whitespace and comments are dropped; there is no EOF token, the parser
    treats running out of tokens as end of input.
    """

    def __init__(self, source: str, filename: str = "<unknown>"):
        """
        Initialize the lexer with source code.

        Args:
            source: Full document text
            filename: Name used in log messages only
        """
        self.source = source
        self.filename = filename
        self.pos = 0
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source.

        Returns:
            Tokens ordered by start offset

        Raises:
            LexerError: if a string literal is not closed before end of input
        """
        self.pos = 0
        self.tokens = []

        while self.pos < len(self.source):
            char = self.source[self.pos]

            if char.isspace():
                self.pos += 1
            elif char == '/' and self._peek(1) == '/':
                self._skip_line_comment()
            elif char == '/' and self._peek(1) == '*':
                self._skip_block_comment()
            elif char in QUOTES:
                self.tokens.append(self._scan_string(char))
            elif char in DIGITS:
                self.tokens.append(self._scan_while(TokenType.NUMBER, NUMBER_CHARS))
            elif char in IDENTIFIER_START_CHARS:
                self.tokens.append(self._scan_identifier())
            elif char + self._peek(1) in TWO_CHAR_OPERATORS:
                lexeme = TWO_CHAR_OPERATORS[char + self._peek(1)]
                self.tokens.append(Token(TokenType.OPERATOR, lexeme, self.pos, self.pos + 2))
                self.pos += 2
            else:
                self.tokens.append(Token(TokenType.SYMBOL, char, self.pos, self.pos + 1))
                self.pos += 1

        logger.debug("%s: %d tokens", self.filename, len(self.tokens))
        return self.tokens

    def _peek(self, offset: int = 0) -> str:
        """Peek at a character ahead of the current position ('' past the end)."""
        index = self.pos + offset
        if index < len(self.source):
            return self.source[index]
        return ''

    def _skip_line_comment(self):
        while self.pos < len(self.source) and self.source[self.pos] != '\n':
            self.pos += 1

    def _skip_block_comment(self):
        # An unterminated block comment swallows the rest of the input
        end = self.source.find('*/', self.pos + 2)
        if end == -1:
            self.pos = len(self.source)
        else:
            self.pos = end + 2

    def _scan_string(self, quote: str) -> Token:
        """Scan a quoted string. Escapes are skipped over, not interpreted."""
        start = self.pos
        self.pos += 1  # opening quote

        while self.pos < len(self.source) and self.source[self.pos] != quote:
            if self.source[self.pos] == '\\':
                self.pos += 2
            else:
                self.pos += 1

        if self.pos >= len(self.source):
            # A trailing backslash can push us one past the end
            self.pos = len(self.source)
            raise create_unterminated_string_error(quote, start, self.pos)

        self.pos += 1  # closing quote
        return Token(TokenType.STRING, self.source[start:self.pos], start, self.pos)

    def _scan_while(self, token_type: TokenType, allowed) -> Token:
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos] in allowed:
            self.pos += 1
        return Token(token_type, self.source[start:self.pos], start, self.pos)

    def _scan_identifier(self) -> Token:
        token = self._scan_while(TokenType.IDENTIFIER, IDENTIFIER_CHARS)
        if token.lexeme in KEYWORDS:
            return Token(TokenType.KEYWORD, token.lexeme, token.start, token.end)
        return token


def tokenize(text: str) -> List[Token]:
    """Tokenize ``text`` in one call. Raises LexerError on an unterminated string."""
    return Lexer(text).tokenize()
