"""
Shallow type checker for Neutron.

Walks the AST once, tracking the declared type of each variable, and reports
assignments and initializers whose inferred type definitely does not fit.
Inference is best-effort: no unification, no function signatures, and
anything it cannot work out is ``any`` (which is compatible with everything).

Author: xwest
"""

import logging
from typing import Dict, List, Optional

from ..parser.ast_nodes import (
    ASTNode, Program, VariableDeclaration, AssignmentExpression, BlockStatement,
    ForStatement, FunctionDeclaration, ClassDeclaration, BinaryExpression,
    LogicalExpression, UnaryExpression, ArrayExpression, ObjectExpression,
    Identifier, Literal
)
from .symbol_table import SymbolTable, TypeTag, ScopeKind
from .errors import SemanticError, create_type_mismatch_error


logger = logging.getLogger(__name__)


COMPARISON_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">=", "and", "or"})
ARITHMETIC_OPERATORS = frozenset({"+", "-", "*", "/", "%"})
OPERATOR_CHAINS = (BinaryExpression, LogicalExpression)


class TypeChecker:
    """
    Neutron type checker.

    Usage::

        errors = TypeChecker().check(program)

    Set ``scoped=True`` to track variables per lexical scope instead of in
    one flat table for the whole document.
    """

    def __init__(self, scoped: bool = False):
        self.scoped = scoped
        self.symbol_table = SymbolTable(scoped)
        self.errors: List[SemanticError] = []

    def check(self, program: Program, errors: Optional[List[SemanticError]] = None) -> List[SemanticError]:
        """
        Type check a whole program.

        Args:
            program: Parsed document
            errors: List to append errors to (a new one if omitted)

        Returns:
            The error list
        """
        self.symbol_table = SymbolTable(self.scoped)
        self.errors = errors if errors is not None else []
        found_before = len(self.errors)

        for statement in program.statements:
            self._check_node(statement)

        logger.debug("type check finished: %d mismatches", len(self.errors) - found_before)
        return self.errors

    def _check_node(self, node: Optional[ASTNode]):
        """Dispatch on node kind; kinds without type rules just recurse."""
        if node is None:
            return

        if isinstance(node, VariableDeclaration):
            self._check_variable_declaration(node)
        elif isinstance(node, AssignmentExpression):
            self._check_assignment(node)
        elif isinstance(node, BlockStatement):
            self._check_in_scope(ScopeKind.BLOCK, node.body)
        elif isinstance(node, ForStatement):
            self._check_in_scope(ScopeKind.LOOP, node.children())
        elif isinstance(node, FunctionDeclaration):
            self._check_function_declaration(node)
        elif isinstance(node, ClassDeclaration):
            self._check_in_scope(ScopeKind.CLASS, node.body.body)
        elif isinstance(node, OPERATOR_CHAINS):
            self._check_operator_chain(node)
        else:
            self._check_children(node)

    def _check_children(self, node: ASTNode):
        for child in node.children():
            self._check_node(child)

    def _check_operator_chain(self, node: ASTNode):
        """Check the operands of nested binary/logical operators, left to right."""
        # Chains like a + a + ... + a nest one level per term; walk them without recursion
        pending = [node]
        while pending:
            current = pending.pop()
            if isinstance(current, OPERATOR_CHAINS):
                pending.append(current.right)
                pending.append(current.left)
            else:
                self._check_node(current)

    def _check_in_scope(self, kind: ScopeKind, nodes: List[ASTNode]):
        self.symbol_table.enter_scope(kind)
        try:
            for child in nodes:
                self._check_node(child)
        finally:
            self.symbol_table.exit_scope()

    def _check_function_declaration(self, function: FunctionDeclaration):
        self.symbol_table.enter_scope(ScopeKind.FUNCTION)
        try:
            # Parameters are tracked in scoped mode only
            if self.scoped:
                for param in function.params:
                    self.symbol_table.define(param.name, TypeTag.ANY, param.start)
            for statement in function.body.body:
                self._check_node(statement)
        finally:
            self.symbol_table.exit_scope()

    def _check_variable_declaration(self, declaration: VariableDeclaration):
        name = declaration.name.name

        if declaration.var_type is None:
            self.symbol_table.define(name, TypeTag.ANY, declaration.start)
            self._check_node(declaration.init)
            return

        declared = TypeTag.from_keyword(declaration.var_type)
        if declaration.init is None:
            self.symbol_table.define(name, declared, declaration.start)
            return

        actual = self.infer_type(declaration.init)
        if self._types_compatible(declared, actual):
            self.symbol_table.define(name, declared, declaration.start)
        else:
            # A failed declaration leaves the variable untracked
            self.errors.append(create_type_mismatch_error(
                declared, actual, declaration.init, f"for variable '{name}'"
            ))

    def _check_assignment(self, assignment: AssignmentExpression):
        name = assignment.left.name
        declared = self.symbol_table.type_of(name)

        if declared is not None and declared != TypeTag.ANY:
            actual = self.infer_type(assignment.right)
            if not self._types_compatible(declared, actual):
                self.errors.append(create_type_mismatch_error(
                    declared, actual, assignment.right, f"when assigning to '{name}'"
                ))

        self._check_node(assignment.right)

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def infer_type(self, node: Optional[ASTNode]) -> TypeTag:
        """Best-effort type of an expression under the current symbol table."""
        if node is None:
            return TypeTag.ANY

        if isinstance(node, Literal):
            return self._infer_literal_type(node)
        elif isinstance(node, ArrayExpression):
            return TypeTag.ARRAY
        elif isinstance(node, ObjectExpression):
            return TypeTag.OBJECT
        elif isinstance(node, Identifier):
            return self.symbol_table.type_of(node.name) or TypeTag.ANY
        elif isinstance(node, OPERATOR_CHAINS):
            return self._infer_binary_type(node)
        elif isinstance(node, UnaryExpression):
            if node.operator == "not":
                return TypeTag.BOOL
            return self.infer_type(node.argument)

        # Calls, member accesses and anything else
        return TypeTag.ANY

    @staticmethod
    def _infer_literal_type(literal: Literal) -> TypeTag:
        if literal.literal_type == "number":
            return TypeTag.FLOAT if "." in literal.raw else TypeTag.INT
        if literal.literal_type == "string":
            return TypeTag.STRING
        if literal.literal_type == "boolean":
            return TypeTag.BOOL
        return TypeTag.ANY  # nil

    def _infer_binary_type(self, node) -> TypeTag:
        """
        Type of a binary/logical expression.

        Post-order walk with an explicit stack, since operand chains can be
        thousands of levels deep. Results are keyed by node identity.
        """
        inferred: Dict[int, TypeTag] = {}
        pending = [(node, False)]
        while pending:
            current, operands_done = pending.pop()
            if not isinstance(current, OPERATOR_CHAINS):
                inferred[id(current)] = self.infer_type(current)
            elif current.operator in COMPARISON_OPERATORS:
                inferred[id(current)] = TypeTag.BOOL
            elif current.operator not in ARITHMETIC_OPERATORS:
                inferred[id(current)] = TypeTag.ANY
            elif not operands_done:
                pending.append((current, True))
                pending.append((current.right, False))
                pending.append((current.left, False))
            else:
                left = inferred[id(current.left)]
                right = inferred[id(current.right)]
                # Division always widens
                if left == TypeTag.INT and right == TypeTag.INT and current.operator != "/":
                    inferred[id(current)] = TypeTag.INT
                else:
                    inferred[id(current)] = TypeTag.FLOAT
        return inferred[id(node)]

    @staticmethod
    def _types_compatible(expected: TypeTag, actual: TypeTag) -> bool:
        """Check if a value of type ``actual`` may be stored as ``expected``."""
        if expected == actual:
            return True
        if expected == TypeTag.ANY or actual == TypeTag.ANY:
            return True
        if expected == TypeTag.FLOAT and actual == TypeTag.INT:
            return True
        # nil fits anywhere; inference never produces it
        if actual == TypeTag.NIL:
            return True
        return False
