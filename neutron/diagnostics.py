"""
Editor-facing diagnostic records for Neutron.

The core stages report problems as character offsets. Editors want
zero-based (line, character) positions, so this module converts the core's
errors into Diagnostic records the way language clients expect them.

Author: xwest
"""

from typing import Any, Dict, Iterable, List
from dataclasses import dataclass
from enum import IntEnum

from .lexer.errors import NeutronError


DEFAULT_SOURCE = "Neutron Type Checker"


class DiagnosticSeverity(IntEnum):
    """Severity levels, numbered the way language clients number them."""
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


@dataclass(frozen=True)
class Position:
    """Zero-based line and character."""
    line: int
    character: int

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True)
class Diagnostic:
    """A problem ready to be published for a document."""
    range: Range
    message: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    source: str = DEFAULT_SOURCE
    code: str = ""

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "severity": int(self.severity),
            "range": self.range.to_dict(),
            "message": self.message,
            "source": self.source,
        }
        if self.code:
            result["code"] = self.code
        return result

    def __str__(self) -> str:
        start = self.range.start
        return f"{start.line + 1}:{start.character + 1}: {self.message}"


def offset_to_position(text: str, offset: int) -> Position:
    """
    Convert a character offset to a zero-based position.

    Linear scan counting ``\\n`` up to the offset; a ``\\r`` is an ordinary
    character. Offsets past the end clamp to the end of the text.
    """
    line = 0
    character = 0
    for index in range(min(offset, len(text))):
        if text[index] == "\n":
            line += 1
            character = 0
        else:
            character += 1
    return Position(line, character)


def offsets_to_range(text: str, start: int, end: int) -> Range:
    return Range(offset_to_position(text, start), offset_to_position(text, end))


def to_diagnostic(text: str, error: NeutronError, source: str = DEFAULT_SOURCE) -> Diagnostic:
    """Convert one core error into a Diagnostic for ``text``."""
    return Diagnostic(
        range=offsets_to_range(text, error.start, error.end),
        message=error.message,
        severity=DiagnosticSeverity.ERROR,
        source=source,
        code=error.code or "",
    )


def to_diagnostics(text: str, errors: Iterable[NeutronError],
                   source: str = DEFAULT_SOURCE) -> List[Diagnostic]:
    return [to_diagnostic(text, error, source) for error in errors]
