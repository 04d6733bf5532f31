"""
Neutron Parser Package

Implements an error-tolerant recursive descent parser for the Neutron
scripting language. Always produces a Program, even for broken input, so the
type checker and editor features keep working while the user types.

Key Features:
- Precedence-climbing expression parser (all binary operators left-associative)
- Immutable token cursor threaded through every parsing function
- Per-statement outcome values with caller-driven resynchronisation
- Soft missing-semicolon diagnostics that keep the statement's AST node
- Source offsets on every node for diagnostic ranges

Author: xwest
"""

from .ast_nodes import (
    ASTNode, ASTNodeType, SourceSpan, Statement, Expression, Program,
    VariableDeclaration, IfStatement, WhileStatement, ForStatement, BlockStatement,
    FunctionDeclaration, ClassDeclaration, ReturnStatement, ExpressionStatement,
    AssignmentExpression, BinaryExpression, LogicalExpression, UnaryExpression,
    CallExpression, MemberExpression, ArrayExpression, ObjectExpression, Property,
    Identifier, Literal
)
from .cursor import TokenCursor, StatementResult
from .parser import Parser, Precedence, parse
from .errors import ParseError, SyntaxErrorRecovery

__all__ = [
    # Core parser
    "Parser", "Precedence", "parse",
    "TokenCursor", "StatementResult",

    # AST nodes
    "ASTNode", "ASTNodeType", "SourceSpan", "Statement", "Expression", "Program",
    "VariableDeclaration", "IfStatement", "WhileStatement", "ForStatement",
    "BlockStatement", "FunctionDeclaration", "ClassDeclaration", "ReturnStatement",
    "ExpressionStatement", "AssignmentExpression", "BinaryExpression",
    "LogicalExpression", "UnaryExpression", "CallExpression", "MemberExpression",
    "ArrayExpression", "ObjectExpression", "Property", "Identifier", "Literal",

    # Error handling
    "ParseError", "SyntaxErrorRecovery",
]
