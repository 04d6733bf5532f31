"""
Abstract Syntax Tree node definitions for Neutron.

The node set is closed: every kind the parser can produce is listed in
ASTNodeType and has one class here. Each node carries the character offsets
it was parsed from and lists its own children explicitly, which is what the
type checker's generic recursion walks.

Author: xwest
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Any, Dict, Tuple
from dataclasses import dataclass
from enum import Enum


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    PROGRAM = "Program"

    # Statements
    VARIABLE_DECLARATION = "VariableDeclaration"
    IF_STATEMENT = "IfStatement"
    WHILE_STATEMENT = "WhileStatement"
    FOR_STATEMENT = "ForStatement"
    BLOCK_STATEMENT = "BlockStatement"
    FUNCTION_DECLARATION = "FunctionDeclaration"
    CLASS_DECLARATION = "ClassDeclaration"
    RETURN_STATEMENT = "ReturnStatement"
    EXPRESSION_STATEMENT = "ExpressionStatement"

    # Expressions
    ASSIGNMENT_EXPRESSION = "AssignmentExpression"
    BINARY_EXPRESSION = "BinaryExpression"
    LOGICAL_EXPRESSION = "LogicalExpression"
    UNARY_EXPRESSION = "UnaryExpression"
    CALL_EXPRESSION = "CallExpression"
    MEMBER_EXPRESSION = "MemberExpression"
    ARRAY_EXPRESSION = "ArrayExpression"
    OBJECT_EXPRESSION = "ObjectExpression"
    PROPERTY = "Property"

    # Leaves
    IDENTIFIER = "Identifier"
    LITERAL = "Literal"


@dataclass(frozen=True)
class SourceSpan:
    """Character offsets of a node in the source (end exclusive)."""
    start: int
    end: int

    def __post_init__(self):
        if self.end < self.start:
            object.__setattr__(self, "end", self.start)

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


def _to_plain(value: Any, pending: List[Tuple['ASTNode', Dict[str, Any]]]) -> Any:
    """Plain value for a field; child nodes become empty dicts queued on ``pending``."""
    if isinstance(value, ASTNode):
        placeholder: Dict[str, Any] = {}
        pending.append((value, placeholder))
        return placeholder
    if isinstance(value, (list, tuple)):
        return [_to_plain(item, pending) for item in value]
    return value


class ASTNode(ABC):
    """Base class for all AST nodes."""

    # Attribute names serialized by to_dict(), in order
    _fields: Tuple[str, ...] = ()

    def __init__(self, node_type: ASTNodeType, span: SourceSpan):
        self.node_type = node_type
        self.span = span

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """
        Plain-data view of the subtree (kind, offsets and fields).

        Built with an explicit work list; operator chains such as
        ``a + a + ... + a`` nest one level per term.
        """
        pending: List[Tuple[ASTNode, Dict[str, Any]]] = []
        result = self._shallow_dict(pending)
        while pending:
            node, target = pending.pop()
            target.update(node._shallow_dict(pending))
        return result

    def _shallow_dict(self, pending: List[Tuple['ASTNode', Dict[str, Any]]]) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "type": self.node_type.value,
            "start": self.start,
            "end": self.end,
        }
        for name in self._fields:
            result[name] = _to_plain(getattr(self, name), pending)
        return result

    def __str__(self) -> str:
        return f"{self.node_type.value}@{self.span}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(span={self.span})"


class Statement(ASTNode):
    """Base class for statements."""
    pass


class Expression(ASTNode):
    """Base class for expressions."""
    pass


# ============================================================================
# Leaves
# ============================================================================

class Identifier(Expression):
    """Identifier reference (also used for declared names and parameters)."""
    _fields = ("name",)

    def __init__(self, name: str, span: SourceSpan):
        super().__init__(ASTNodeType.IDENTIFIER, span)
        self.name = name

    def children(self) -> List[ASTNode]:
        return []


class Literal(Expression):
    """
    Literal value.

    ``literal_type`` is one of "number", "string", "boolean" or "nil".
    ``raw`` is the source text; the type checker decides int vs float from it.
    """
    _fields = ("value", "raw", "literal_type")

    def __init__(self, value: Any, raw: str, literal_type: str, span: SourceSpan):
        super().__init__(ASTNodeType.LITERAL, span)
        self.value = value
        self.raw = raw
        self.literal_type = literal_type

    def children(self) -> List[ASTNode]:
        return []

    def _shallow_dict(self, pending) -> Dict[str, Any]:
        result = super()._shallow_dict(pending)
        # NaN never equals itself, which would break structural comparison
        if isinstance(self.value, float) and self.value != self.value:
            result["value"] = None
        return result


# ============================================================================
# Expressions
# ============================================================================

class AssignmentExpression(Expression):
    """Assignment ``left = right``; ``left`` is always an Identifier."""
    _fields = ("operator", "left", "right")

    def __init__(self, operator: str, left: Identifier, right: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.ASSIGNMENT_EXPRESSION, span)
        self.operator = operator
        self.left = left
        self.right = right

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


class BinaryExpression(Expression):
    """Arithmetic, relational or equality operation."""
    _fields = ("operator", "left", "right")

    def __init__(self, operator: str, left: Expression, right: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.BINARY_EXPRESSION, span)
        self.operator = operator
        self.left = left
        self.right = right

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


class LogicalExpression(Expression):
    """``and`` / ``or`` operation."""
    _fields = ("operator", "left", "right")

    def __init__(self, operator: str, left: Expression, right: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.LOGICAL_EXPRESSION, span)
        self.operator = operator
        self.left = left
        self.right = right

    def children(self) -> List[ASTNode]:
        return [self.left, self.right]


class UnaryExpression(Expression):
    """Prefix ``not`` or ``-``."""
    _fields = ("operator", "argument")

    def __init__(self, operator: str, argument: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.UNARY_EXPRESSION, span)
        self.operator = operator
        self.argument = argument

    def children(self) -> List[ASTNode]:
        return [self.argument]


class CallExpression(Expression):
    """Function or method call."""
    _fields = ("callee", "arguments")

    def __init__(self, callee: Expression, arguments: List[Expression], span: SourceSpan):
        super().__init__(ASTNodeType.CALL_EXPRESSION, span)
        self.callee = callee
        self.arguments = arguments

    def children(self) -> List[ASTNode]:
        return [self.callee] + self.arguments


class MemberExpression(Expression):
    """Member access ``obj.property``."""
    _fields = ("obj", "property")

    def __init__(self, obj: Expression, property: Identifier, span: SourceSpan):
        super().__init__(ASTNodeType.MEMBER_EXPRESSION, span)
        self.obj = obj
        self.property = property

    def children(self) -> List[ASTNode]:
        return [self.obj, self.property]


class ArrayExpression(Expression):
    """Array literal ``[a, b, c]``."""
    _fields = ("elements",)

    def __init__(self, elements: List[Expression], span: SourceSpan):
        super().__init__(ASTNodeType.ARRAY_EXPRESSION, span)
        self.elements = elements

    def children(self) -> List[ASTNode]:
        return list(self.elements)


class Property(ASTNode):
    """One ``"key": value`` entry of an object literal."""
    _fields = ("key", "value")

    def __init__(self, key: Literal, value: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.PROPERTY, span)
        self.key = key
        self.value = value

    def children(self) -> List[ASTNode]:
        return [self.key, self.value]


class ObjectExpression(Expression):
    """Object literal with string keys."""
    _fields = ("properties",)

    def __init__(self, properties: List[Property], span: SourceSpan):
        super().__init__(ASTNodeType.OBJECT_EXPRESSION, span)
        self.properties = properties

    def children(self) -> List[ASTNode]:
        return list(self.properties)


# ============================================================================
# Statements
# ============================================================================

class VariableDeclaration(Statement):
    """``var [type] name [= init]``; ``var_type`` is None when untyped."""
    _fields = ("var_type", "name", "init")

    def __init__(self, name: Identifier, var_type: Optional[str],
                 init: Optional[Expression], span: SourceSpan):
        super().__init__(ASTNodeType.VARIABLE_DECLARATION, span)
        self.name = name
        self.var_type = var_type
        self.init = init

    def children(self) -> List[ASTNode]:
        children = [self.name]
        if self.init is not None:
            children.append(self.init)
        return children


class BlockStatement(Statement):
    """Brace-delimited statement list, or a single-statement body."""
    _fields = ("body",)

    def __init__(self, body: List[ASTNode], span: SourceSpan):
        super().__init__(ASTNodeType.BLOCK_STATEMENT, span)
        self.body = body

    def children(self) -> List[ASTNode]:
        return list(self.body)


class IfStatement(Statement):
    """If statement; ``alternate`` is a block, a nested IfStatement or None."""
    _fields = ("test", "consequent", "alternate")

    def __init__(self, test: Expression, consequent: BlockStatement,
                 alternate: Optional[Statement], span: SourceSpan):
        super().__init__(ASTNodeType.IF_STATEMENT, span)
        self.test = test
        self.consequent = consequent
        self.alternate = alternate

    def children(self) -> List[ASTNode]:
        children = [self.test, self.consequent]
        if self.alternate is not None:
            children.append(self.alternate)
        return children


class WhileStatement(Statement):
    """While loop."""
    _fields = ("test", "body")

    def __init__(self, test: Expression, body: BlockStatement, span: SourceSpan):
        super().__init__(ASTNodeType.WHILE_STATEMENT, span)
        self.test = test
        self.body = body

    def children(self) -> List[ASTNode]:
        return [self.test, self.body]


class ForStatement(Statement):
    """C-style for loop; every clause is optional."""
    _fields = ("init", "test", "update", "body")

    def __init__(self, init: Optional[ASTNode], test: Optional[Expression],
                 update: Optional[Expression], body: BlockStatement, span: SourceSpan):
        super().__init__(ASTNodeType.FOR_STATEMENT, span)
        self.init = init
        self.test = test
        self.update = update
        self.body = body

    def children(self) -> List[ASTNode]:
        clauses = [self.init, self.test, self.update, self.body]
        return [clause for clause in clauses if clause is not None]


class FunctionDeclaration(Statement):
    """Function declaration ``fun name(params) body``."""
    _fields = ("name", "params", "body")

    def __init__(self, name: Identifier, params: List[Identifier],
                 body: BlockStatement, span: SourceSpan):
        super().__init__(ASTNodeType.FUNCTION_DECLARATION, span)
        self.name = name
        self.params = params
        self.body = body

    def children(self) -> List[ASTNode]:
        return [self.name] + self.params + [self.body]


class ClassDeclaration(Statement):
    """Class declaration ``class Name { ... }``."""
    _fields = ("name", "body")

    def __init__(self, name: Identifier, body: BlockStatement, span: SourceSpan):
        super().__init__(ASTNodeType.CLASS_DECLARATION, span)
        self.name = name
        self.body = body

    def children(self) -> List[ASTNode]:
        return [self.name, self.body]


class ReturnStatement(Statement):
    """Return statement with an optional value."""
    _fields = ("argument",)

    def __init__(self, argument: Optional[Expression], span: SourceSpan):
        super().__init__(ASTNodeType.RETURN_STATEMENT, span)
        self.argument = argument

    def children(self) -> List[ASTNode]:
        return [self.argument] if self.argument is not None else []


class ExpressionStatement(Statement):
    """Expression evaluated for its side effects."""
    _fields = ("expression",)

    def __init__(self, expression: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.EXPRESSION_STATEMENT, span)
        self.expression = expression

    def children(self) -> List[ASTNode]:
        return [self.expression]


# ============================================================================
# Top level
# ============================================================================

class Program(ASTNode):
    """
    Root AST node representing a complete document.

    ``statements`` holds top-level statements (assignments appear here
    directly as AssignmentExpression nodes). ``syntax_errors`` holds every
    ParseError recorded during the parse, in the order they were found.
    """
    _fields = ("statements", "syntax_errors")

    def __init__(self, statements: List[ASTNode], syntax_errors: List[Any], span: SourceSpan):
        super().__init__(ASTNodeType.PROGRAM, span)
        self.statements = statements
        self.syntax_errors = syntax_errors

    def children(self) -> List[ASTNode]:
        return list(self.statements)

    def _shallow_dict(self, pending) -> Dict[str, Any]:
        result = super()._shallow_dict(pending)
        result["syntax_errors"] = [error.to_dict() for error in self.syntax_errors]
        return result
