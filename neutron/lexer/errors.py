"""
Error handling for the Neutron lexer.

The lexer has exactly one fatal condition, an unterminated string literal.
Everything else (stray characters, unterminated block comments) is tolerated
and left for the parser to judge. The record types defined here are shared by
the parser and the type checker so that every stage reports problems in the
same offset-based shape.

Author: xwest
"""

from typing import Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class SourceDiagnostic:
    """An offset-based problem report produced by one of the core stages."""
    message: str
    start: int
    end: int
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None

    def __str__(self) -> str:
        result = f"{self.severity.upper()}: {self.message}\n"
        result += f"  --> offsets {self.start}..{self.end}\n"
        if self.help_text:
            result += f"  help: {self.help_text}\n"
        return result


class NeutronError(Exception):
    """
    Base class for problems reported by the Neutron front-end.

    Wraps a :class:`SourceDiagnostic` and exposes its message and range
    directly, which is what diagnostic conversion needs.
    """

    severity = "error"

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        super().__init__(message)
        self.diagnostic = SourceDiagnostic(
            message=message,
            start=start,
            end=max(start, end),
            severity=self.severity,
            code=code,
            help_text=help_text
        )

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def start(self) -> int:
        return self.diagnostic.start

    @property
    def end(self) -> int:
        return self.diagnostic.end

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    def __str__(self) -> str:
        return str(self.diagnostic)


class LexerError(NeutronError):
    """
    Exception raised when the lexer cannot tokenize the input at all.

    Callers must treat it as "no diagnostics derivable for this revision".
    """


def create_unterminated_string_error(quote: str, start: int, end: int) -> LexerError:
    """Create an error for a string literal that never closes."""
    return LexerError(
        message=f"Unterminated string at position {start}",
        start=start,
        end=end,
        code="L002",
        help_text=f"String literals must be closed with a matching {quote} quote."
    )
