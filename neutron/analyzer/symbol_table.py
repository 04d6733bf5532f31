"""
Symbol table and scope management for Neutron type checking.

By default the table is flat: one scope for the whole document, and a
re-declaration anywhere simply overwrites the earlier entry. That is how
existing Neutron tooling behaves and diagnostics depend on it. With
``scoped=True`` the table becomes a proper scope stack (blocks, functions,
classes and for loops each push a scope and lookups walk outward).

Author: xwest
"""

from typing import Dict, Optional
from dataclasses import dataclass, field
from enum import Enum


class TypeTag(Enum):
    """Type tags tracked by the checker."""
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"
    NIL = "nil"  # never inferred; only the compatibility rule knows it

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_keyword(cls, keyword: str) -> 'TypeTag':
        """Map a declared type keyword (``int``, ``float``, ...) to its tag."""
        return cls(keyword)


class ScopeKind(Enum):
    """Types of scopes."""
    DOCUMENT = "document"
    BLOCK = "block"
    FUNCTION = "function"
    CLASS = "class"
    LOOP = "loop"


@dataclass
class Symbol:
    """A tracked variable."""
    name: str
    type_tag: TypeTag
    offset: Optional[int] = None  # where it was declared, if known

    def __str__(self) -> str:
        return f"{self.name}: {self.type_tag}"


@dataclass
class Scope:
    """Represents a lexical scope."""
    kind: ScopeKind
    symbols: Dict[str, Symbol] = field(default_factory=dict)
    parent: Optional['Scope'] = None

    def define_symbol(self, symbol: Symbol) -> None:
        """Define a symbol in this scope. Last write wins."""
        self.symbols[symbol.name] = symbol

    def lookup_symbol(self, name: str) -> Optional[Symbol]:
        """Look up a symbol in this scope and parent scopes."""
        if name in self.symbols:
            return self.symbols[name]
        if self.parent:
            return self.parent.lookup_symbol(name)
        return None


class SymbolTable:
    """
    Variable name to type tag mapping for one document pass.

    ``enter_scope``/``exit_scope`` are no-ops unless the table was created
    with ``scoped=True``, so the checker can call them unconditionally.
    """

    def __init__(self, scoped: bool = False):
        self.scoped = scoped
        self.global_scope = Scope(ScopeKind.DOCUMENT)
        self.current_scope = self.global_scope

    def enter_scope(self, kind: ScopeKind) -> None:
        if self.scoped:
            self.current_scope = Scope(kind, parent=self.current_scope)

    def exit_scope(self) -> None:
        if self.scoped and self.current_scope.parent is not None:
            self.current_scope = self.current_scope.parent

    def define(self, name: str, type_tag: TypeTag, offset: Optional[int] = None) -> Symbol:
        symbol = Symbol(name, type_tag, offset)
        self.current_scope.define_symbol(symbol)
        return symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        return self.current_scope.lookup_symbol(name)

    def type_of(self, name: str) -> Optional[TypeTag]:
        """Tracked type of ``name``, or None when it is not tracked."""
        symbol = self.lookup(name)
        return symbol.type_tag if symbol is not None else None

    @property
    def depth(self) -> int:
        depth, scope = 0, self.current_scope
        while scope.parent is not None:
            depth, scope = depth + 1, scope.parent
        return depth
