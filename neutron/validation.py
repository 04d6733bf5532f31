"""
Document validation pipeline for Neutron.

Runs tokenize -> parse -> type check from scratch on every call and turns the
result into Diagnostics. DocumentValidator keeps the latest diagnostics per
document and makes sure an older validation of a document can never
overwrite a newer one.

Author: xwest
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional
from dataclasses import dataclass

from .lexer.errors import LexerError, NeutronError
from .parser.parser import parse
from .analyzer.type_checker import TypeChecker
from .diagnostics import Diagnostic, to_diagnostics


logger = logging.getLogger(__name__)


# Editor setting name -> (attribute, expected type)
_SETTING_KEYS = {
    "enableTypeChecking": ("enable_type_checking", bool),
    "maxNumberOfProblems": ("max_number_of_problems", int),
    "scopedSymbols": ("scoped_symbols", bool),
}


@dataclass(frozen=True)
class ValidationSettings:
    """Per-document validation settings."""
    enable_type_checking: bool = True
    max_number_of_problems: int = 1000
    scoped_symbols: bool = False

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> 'ValidationSettings':
        """
        Build settings from editor-style configuration.

        Accepts either ``{"neutron": {...}}`` or the inner section itself.
        Unknown keys are ignored.

        Raises:
            ValueError: if a known key has a value of the wrong type
        """
        if mapping is None:
            return cls()
        section = mapping.get("neutron", mapping)
        if section is None:
            return cls()
        if not isinstance(section, Mapping):
            raise ValueError("neutron settings must be a mapping")

        values = {}
        for key, (attribute, expected) in _SETTING_KEYS.items():
            if key not in section:
                continue
            value = section[key]
            # bool is an int subclass; don't accept true as a problem limit
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise ValueError(f"neutron.{key} must be of type {expected.__name__}, got {value!r}")
            if attribute == "max_number_of_problems" and value < 0:
                raise ValueError(f"neutron.{key} must not be negative, got {value}")
            values[attribute] = value
        return cls(**values)


DEFAULT_SETTINGS = ValidationSettings()


def validate_text(text: str, settings: Optional[ValidationSettings] = None,
                  filename: str = "<unknown>") -> List[Diagnostic]:
    """
    Validate one document.

    Syntax errors come first in parse order, then type errors. A document
    that cannot be tokenized at all yields no diagnostics.
    """
    settings = settings or DEFAULT_SETTINGS
    if not settings.enable_type_checking:
        return []

    started = time.perf_counter()
    try:
        program = parse(text, filename)
    except LexerError as error:
        logger.warning("%s: cannot parse: %s", filename, error.message)
        return []

    errors: List[NeutronError] = list(program.syntax_errors)
    TypeChecker(scoped=settings.scoped_symbols).check(program, errors)

    diagnostics = to_diagnostics(text, errors)[:settings.max_number_of_problems]
    elapsed = (time.perf_counter() - started) * 1000
    if diagnostics:
        logger.debug("%s: %d problems (%.2f ms)", filename, len(diagnostics), elapsed)
    else:
        logger.debug("%s: no problems (%.2f ms)", filename, elapsed)
    return diagnostics


SettingsProvider = Callable[[str], ValidationSettings]
Publisher = Callable[[str, List[Diagnostic]], None]


class DocumentValidator:
    """
    Keeps the current diagnostics of every open document.

    Validations of different documents are independent and may run on
    different threads. For the same document the most recently started
    validation wins: results of a superseded run are dropped, never stored
    or published.
    """

    def __init__(self, settings_provider: Optional[SettingsProvider] = None,
                 publish: Optional[Publisher] = None):
        self.settings_provider = settings_provider
        self.publish = publish
        # Guards the per-URI maps; never held while calling out
        self._lock = threading.Lock()
        self._revisions: Dict[str, int] = {}
        self._diagnostics: Dict[str, List[Diagnostic]] = {}
        # One re-entrant lock per URI orders store-and-publish for that document
        self._publish_locks: Dict[str, Any] = {}

    def _settings_for(self, uri: str) -> ValidationSettings:
        if self.settings_provider is None:
            return DEFAULT_SETTINGS
        return self.settings_provider(uri) or DEFAULT_SETTINGS

    def _next_revision(self, uri: str) -> int:
        with self._lock:
            revision = self._revisions.get(uri, 0) + 1
            self._revisions[uri] = revision
            return revision

    def _publish_lock(self, uri: str):
        with self._lock:
            return self._publish_locks.setdefault(uri, threading.RLock())

    def validate(self, uri: str, text: str) -> Optional[List[Diagnostic]]:
        """
        Validate ``text`` as the new content of ``uri``.

        Returns the diagnostics, or None if a newer validation of the same
        document started while this one was running.

        ``publish`` is called without the shared lock held, so it may call
        back into the validator. Publishes for one document never overtake
        each other; other documents are not blocked by a slow publisher.
        """
        revision = self._next_revision(uri)
        diagnostics = validate_text(text, self._settings_for(uri), filename=uri)

        with self._publish_lock(uri):
            with self._lock:
                if self._revisions.get(uri) != revision:
                    logger.debug("%s: dropping stale diagnostics of revision %d", uri, revision)
                    return None
                self._diagnostics[uri] = diagnostics
            if self.publish is not None:
                self.publish(uri, diagnostics)
        return diagnostics

    def diagnostics(self, uri: str) -> List[Diagnostic]:
        """Latest stored diagnostics for ``uri`` (empty if never validated)."""
        with self._lock:
            return list(self._diagnostics.get(uri, []))

    def close(self, uri: str):
        """Forget a document and clear its published diagnostics."""
        self._next_revision(uri)
        with self._publish_lock(uri):
            with self._lock:
                self._diagnostics.pop(uri, None)
            if self.publish is not None:
                self.publish(uri, [])

    def revalidate_all(self, texts: Mapping[str, str]) -> Dict[str, Optional[List[Diagnostic]]]:
        """Revalidate every given document, e.g. after a configuration change."""
        return {uri: self.validate(uri, text) for uri, text in texts.items()}
