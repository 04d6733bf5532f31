"""
Neutron Type Checker Package

Implements the shallow, best-effort type checking pass for Neutron:
- Literal, operator and identifier type inference
- Declared-type checks on `var T name = expr` and later reassignments
- int to float widening
- Flat per-document symbol table, or an opt-in lexical scope stack

Author: xwest
"""

from .type_checker import TypeChecker
from .symbol_table import SymbolTable, Symbol, Scope, ScopeKind, TypeTag
from .errors import SemanticError

__all__ = [
    # Main checker
    "TypeChecker",

    # Symbol management
    "SymbolTable", "Symbol", "Scope", "ScopeKind", "TypeTag",

    # Error handling
    "SemanticError",
]
