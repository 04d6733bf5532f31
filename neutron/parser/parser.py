"""
Neutron Parser - recursive descent with statement-level error recovery

One parsing function per statement kind plus a precedence-climbing
expression parser. Position is an immutable TokenCursor passed in and handed
back by every function, so there is no hidden "current token" state to get
out of sync after a failure.

Recovery works per statement: a statement attempt either produces a node or
a ParseError, and the statement-list loop records the error and skips to the
next recovery point. Missing terminators are reported but do not fail the
statement, so the type checker still sees the node.

xwest
"""

import logging
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple, Union

from ..lexer.tokens import Token, TokenType, TYPE_KEYWORDS
from ..lexer.lexer import Lexer
from .ast_nodes import (
    SourceSpan, ASTNode, Expression, Program,
    VariableDeclaration, IfStatement, WhileStatement, ForStatement, BlockStatement,
    FunctionDeclaration, ClassDeclaration, ReturnStatement, ExpressionStatement,
    AssignmentExpression, BinaryExpression, LogicalExpression, UnaryExpression,
    CallExpression, MemberExpression, ArrayExpression, ObjectExpression, Property,
    Identifier, Literal
)
from .cursor import TokenCursor, StatementResult
from .errors import (
    ParseError, SyntaxErrorRecovery, create_unexpected_token_error,
    create_missing_token_error, create_missing_semicolon_error
)


logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    """Operator precedence levels (higher number = higher precedence)."""
    NONE = 0
    OR = 1              # or, ||
    AND = 2             # and, &&
    EQUALITY = 3        # == !=
    RELATIONAL = 4      # < <= > >=
    ADDITIVE = 5        # + -
    MULTIPLICATIVE = 6  # * / %
    UNARY = 7           # not -


BINARY_PRECEDENCE = {
    "or": Precedence.OR,
    "and": Precedence.AND,
    "==": Precedence.EQUALITY,
    "!=": Precedence.EQUALITY,
    "<": Precedence.RELATIONAL,
    "<=": Precedence.RELATIONAL,
    ">": Precedence.RELATIONAL,
    ">=": Precedence.RELATIONAL,
    "+": Precedence.ADDITIVE,
    "-": Precedence.ADDITIVE,
    "*": Precedence.MULTIPLICATIVE,
    "/": Precedence.MULTIPLICATIVE,
    "%": Precedence.MULTIPLICATIVE,
}

LOGICAL_OPERATORS = frozenset({"and", "or"})
UNARY_OPERATORS = frozenset({"not", "-"})
LINE_BREAKS = "\n\r"

ParseOutcome = Tuple[ASTNode, TokenCursor]


def _number_value(raw: str) -> Union[int, float]:
    # Lenient tokens like 1.2.3 have no numeric value
    try:
        return float(raw) if "." in raw else int(raw)
    except ValueError:
        return float("nan")


class Parser:
    """
    Neutron parser.

    Builds a Program from a token list. Never raises on malformed input:
    syntax errors end up in ``Program.syntax_errors``.
    """

    def __init__(self, tokens: Sequence[Token], source: str = "", filename: str = "<unknown>"):
        """
        Args:
            tokens: Output of the lexer
            source: Original text, needed to find line ends for
                missing-semicolon ranges
            filename: Name used in log messages only
        """
        self.tokens = tuple(tokens)
        self.source = source
        self.filename = filename
        self.errors: List[ParseError] = []

        self._statement_parsers = {
            "var": self._parse_variable_declaration,
            "if": self._parse_if_statement,
            "while": self._parse_while_statement,
            "for": self._parse_for_statement,
            "fun": self._parse_function_declaration,
            "class": self._parse_class_declaration,
            "return": self._parse_return_statement,
        }

    def parse(self) -> Program:
        """Parse the whole token list into a Program."""
        self.errors = []
        statements, _ = self._parse_statement_list(TokenCursor(self.tokens), closing=None)

        end = len(self.source)
        if self.tokens:
            end = max(end, self.tokens[-1].end)
        logger.debug("%s: parsed %d statements, %d syntax errors",
                     self.filename, len(statements), len(self.errors))
        return Program(statements, list(self.errors), SourceSpan(0, end))

    # ------------------------------------------------------------------
    # Statement lists and recovery
    # ------------------------------------------------------------------

    def _parse_statement_list(self, cursor: TokenCursor,
                              closing: Optional[str]) -> Tuple[List[ASTNode], TokenCursor]:
        """Parse statements until end of input or the closing delimiter."""
        statements: List[ASTNode] = []
        while not cursor.at_end():
            if closing is not None and cursor.check(closing):
                break
            statement, cursor = self._parse_statement(cursor)
            if statement is not None:
                statements.append(statement)
        return statements, cursor

    def _parse_statement(self, cursor: TokenCursor) -> Tuple[Optional[ASTNode], TokenCursor]:
        """Run one statement attempt and drive recovery if it failed."""
        result = self._attempt_statement(cursor)
        if result.ok:
            return result.node, result.cursor

        error = result.error
        self.errors.append(error)
        resume = SyntaxErrorRecovery.synchronize(result.cursor)
        if resume.index <= cursor.index:
            resume = cursor.advance()
        logger.debug("%s: %s at %d, resuming at token %d",
                     self.filename, error.message, error.start, resume.index)
        return None, resume

    def _attempt_statement(self, cursor: TokenCursor) -> StatementResult:
        token = cursor.peek()
        if token is None:
            return StatementResult.success(None, cursor)

        if token.is_keyword and token.lexeme in self._statement_parsers:
            parse_function = self._statement_parsers[token.lexeme]
        elif token.is_identifier:
            parse_function = self._parse_expression_statement
        else:
            # Not a statement start: skip it and everything up to the next boundary
            logger.debug("%s: skipping unexpected %s at %d", self.filename, token, token.start)
            return StatementResult.success(None, SyntaxErrorRecovery.synchronize(cursor.advance()))

        try:
            node, cursor = parse_function(cursor)
        except ParseError as error:
            return StatementResult.failure(error)
        return StatementResult.success(node, cursor)

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _expect(self, cursor: TokenCursor, lexeme: str, message: str) -> Tuple[Token, TokenCursor]:
        """Consume a required token or fail the statement."""
        if cursor.check(lexeme):
            return cursor.peek(), cursor.advance()
        raise create_missing_token_error(message, cursor)

    def _expect_identifier(self, cursor: TokenCursor, message: str) -> Tuple[Identifier, TokenCursor]:
        token = cursor.peek()
        if token is None or not token.is_identifier:
            raise create_missing_token_error(message, cursor)
        return Identifier(token.lexeme, SourceSpan(token.start, token.end)), cursor.advance()

    def _terminate(self, cursor: TokenCursor, what: str, statement_end: int) -> Tuple[int, TokenCursor]:
        """
        Consume the ``;`` ending a statement.

        When it is missing the soft error is recorded and parsing goes on.
        Returns the statement's final end offset and the new cursor.
        """
        if cursor.check(";"):
            return cursor.peek().end, cursor.advance()
        self.errors.append(
            create_missing_semicolon_error(what, statement_end, self._end_of_line(statement_end))
        )
        return statement_end, cursor

    def _end_of_line(self, offset: int) -> int:
        for index in range(offset, len(self.source)):
            if self.source[index] in LINE_BREAKS:
                return index
        return len(self.source)

    @staticmethod
    def _span_between(start: TokenCursor, end: TokenCursor) -> SourceSpan:
        """Span covering the tokens consumed between two cursors."""
        first = start.peek()
        if first is None or end.index <= start.index:
            previous = start.previous()
            offset = previous.end if previous is not None else 0
            return SourceSpan(offset, offset)
        return SourceSpan(first.start, end.previous().end)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_variable_binding(self, cursor: TokenCursor) -> Tuple[VariableDeclaration, TokenCursor]:
        """Parse ``var [type] name [= init]`` without its terminator."""
        start = cursor.peek().start
        cursor = cursor.advance()  # 'var'

        var_type = None
        token = cursor.peek()
        if token is not None and token.is_keyword and token.lexeme in TYPE_KEYWORDS:
            var_type = token.lexeme
            cursor = cursor.advance()

        name, cursor = self._expect_identifier(cursor, "Expected variable name in declaration")

        init = None
        if cursor.check("="):
            init, cursor = self._parse_expression(cursor.advance())

        end = init.end if init is not None else name.end
        return VariableDeclaration(name, var_type, init, SourceSpan(start, end)), cursor

    def _parse_variable_declaration(self, cursor: TokenCursor) -> ParseOutcome:
        declaration, cursor = self._parse_variable_binding(cursor)
        end, cursor = self._terminate(cursor, "variable declaration", declaration.end)
        declaration.span = SourceSpan(declaration.start, end)
        return declaration, cursor

    def _parse_if_statement(self, cursor: TokenCursor) -> ParseOutcome:
        keyword = cursor.peek()
        cursor = cursor.advance()  # 'if' or 'elif'

        _, cursor = self._expect(cursor, "(", f"Expected '(' after '{keyword.lexeme}'")
        test, cursor = self._parse_expression(cursor)
        _, cursor = self._expect(cursor, ")", "Expected ')' after if condition")

        consequent, cursor = self._parse_block(cursor)

        alternate = None
        if cursor.check("else"):
            cursor = cursor.advance()
            if cursor.check("if"):
                alternate, cursor = self._parse_if_statement(cursor)
            else:
                alternate, cursor = self._parse_block(cursor)
        elif cursor.check("elif"):
            alternate, cursor = self._parse_if_statement(cursor)

        end = alternate.end if alternate is not None else consequent.end
        return IfStatement(test, consequent, alternate, SourceSpan(keyword.start, end)), cursor

    def _parse_while_statement(self, cursor: TokenCursor) -> ParseOutcome:
        start = cursor.peek().start
        cursor = cursor.advance()  # 'while'

        _, cursor = self._expect(cursor, "(", "Expected '(' after 'while'")
        test, cursor = self._parse_expression(cursor)
        _, cursor = self._expect(cursor, ")", "Expected ')' after while condition")

        body, cursor = self._parse_block(cursor)
        return WhileStatement(test, body, SourceSpan(start, body.end)), cursor

    def _parse_for_statement(self, cursor: TokenCursor) -> ParseOutcome:
        start = cursor.peek().start
        cursor = cursor.advance()  # 'for'

        _, cursor = self._expect(cursor, "(", "Expected '(' after 'for'")

        init = None
        if not cursor.check(";"):
            if cursor.check("var"):
                init, cursor = self._parse_variable_binding(cursor)
            else:
                init, cursor = self._parse_expression_or_assignment(cursor)
        _, cursor = self._expect(cursor, ";", "Expected ';' after for init")

        test = None
        if not cursor.check(";"):
            test, cursor = self._parse_expression(cursor)
        _, cursor = self._expect(cursor, ";", "Expected ';' after for test")

        update = None
        if not cursor.check(")"):
            update, cursor = self._parse_expression_or_assignment(cursor)
        _, cursor = self._expect(cursor, ")", "Expected ')' after for update")

        body, cursor = self._parse_block(cursor)
        return ForStatement(init, test, update, body, SourceSpan(start, body.end)), cursor

    def _parse_block(self, cursor: TokenCursor) -> Tuple[BlockStatement, TokenCursor]:
        """
        Parse a block body.

        Either a brace-delimited statement list or, without a ``{``, a single
        statement. A brace block still open at end of input is closed
        implicitly.
        """
        if cursor.check("{"):
            start = cursor.peek().start
            body, cursor = self._parse_statement_list(cursor.advance(), closing="}")
            if cursor.check("}"):
                end = cursor.peek().end
                cursor = cursor.advance()
            else:
                end = cursor.previous().end
            return BlockStatement(body, SourceSpan(start, end)), cursor

        start_cursor = cursor
        statement, cursor = self._parse_statement(cursor)
        body = [statement] if statement is not None else []
        return BlockStatement(body, self._span_between(start_cursor, cursor)), cursor

    def _parse_function_declaration(self, cursor: TokenCursor) -> ParseOutcome:
        start = cursor.peek().start
        cursor = cursor.advance()  # 'fun'

        name, cursor = self._expect_identifier(cursor, "Expected function name after 'fun'")
        _, cursor = self._expect(cursor, "(", "Expected '(' after function name")

        params: List[Identifier] = []
        if not cursor.check(")"):
            param, cursor = self._optional_parameter(cursor)
            params.extend(param)
            while cursor.check(","):
                param, cursor = self._optional_parameter(cursor.advance())
                params.extend(param)
        _, cursor = self._expect(cursor, ")", "Expected ')' after function parameters")

        body, cursor = self._parse_block(cursor)
        return FunctionDeclaration(name, params, body, SourceSpan(start, body.end)), cursor

    @staticmethod
    def _optional_parameter(cursor: TokenCursor) -> Tuple[List[Identifier], TokenCursor]:
        # Parameter lists are lenient: a trailing comma is accepted
        token = cursor.peek()
        if token is not None and token.is_identifier:
            return [Identifier(token.lexeme, SourceSpan(token.start, token.end))], cursor.advance()
        return [], cursor

    def _parse_class_declaration(self, cursor: TokenCursor) -> ParseOutcome:
        start = cursor.peek().start
        cursor = cursor.advance()  # 'class'

        name, cursor = self._expect_identifier(cursor, "Expected class name after 'class'")
        if not cursor.check("{"):
            raise create_missing_token_error("Expected '{' to start class body", cursor)

        body, cursor = self._parse_block(cursor)
        return ClassDeclaration(name, body, SourceSpan(start, body.end)), cursor

    def _parse_return_statement(self, cursor: TokenCursor) -> ParseOutcome:
        start_cursor = cursor
        cursor = cursor.advance()  # 'return'

        argument = None
        if not (cursor.at_end() or cursor.check(";") or cursor.check("}")):
            argument, cursor = self._parse_expression(cursor)

        # The terminator is optional after return
        if cursor.check(";"):
            cursor = cursor.advance()

        return ReturnStatement(argument, self._span_between(start_cursor, cursor)), cursor

    def _parse_expression_statement(self, cursor: TokenCursor) -> ParseOutcome:
        expression, cursor = self._parse_expression_or_assignment(cursor)

        if isinstance(expression, AssignmentExpression):
            end, cursor = self._terminate(cursor, "assignment", expression.end)
            expression.span = SourceSpan(expression.start, end)
            return expression, cursor

        end, cursor = self._terminate(cursor, "statement", expression.end)
        return ExpressionStatement(expression, SourceSpan(expression.start, end)), cursor

    def _parse_expression_or_assignment(self, cursor: TokenCursor) -> Tuple[Expression, TokenCursor]:
        """An expression, reinterpreted as an assignment when it is ``name = value``."""
        expression, cursor = self._parse_expression(cursor)
        if isinstance(expression, Identifier) and cursor.check("="):
            value, cursor = self._parse_expression(cursor.advance())
            span = SourceSpan(expression.start, value.end)
            return AssignmentExpression("=", expression, value, span), cursor
        return expression, cursor

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self, cursor: TokenCursor) -> Tuple[Expression, TokenCursor]:
        return self._parse_binary(cursor, Precedence.OR)

    def _parse_binary(self, cursor: TokenCursor,
                      min_precedence: Precedence) -> Tuple[Expression, TokenCursor]:
        """Precedence climbing; every binary operator is left-associative."""
        left, cursor = self._parse_unary(cursor)

        while True:
            operator = cursor.peek()
            if operator is None:
                break
            precedence = BINARY_PRECEDENCE.get(operator.lexeme)
            if precedence is None or precedence < min_precedence:
                break

            right, cursor = self._parse_binary(cursor.advance(), Precedence(precedence + 1))
            span = SourceSpan(left.start, right.end)
            if operator.lexeme in LOGICAL_OPERATORS:
                left = LogicalExpression(operator.lexeme, left, right, span)
            else:
                left = BinaryExpression(operator.lexeme, left, right, span)

        return left, cursor

    def _parse_unary(self, cursor: TokenCursor) -> Tuple[Expression, TokenCursor]:
        token = cursor.peek()
        if token is not None and token.lexeme in UNARY_OPERATORS:
            argument, cursor = self._parse_unary(cursor.advance())
            return UnaryExpression(token.lexeme, argument, SourceSpan(token.start, argument.end)), cursor
        return self._parse_primary(cursor)

    def _parse_primary(self, cursor: TokenCursor) -> Tuple[Expression, TokenCursor]:
        token = cursor.peek()
        if token is None:
            raise create_unexpected_token_error(cursor)

        span = SourceSpan(token.start, token.end)

        if token.type == TokenType.NUMBER:
            return Literal(_number_value(token.lexeme), token.lexeme, "number", span), cursor.advance()

        if token.type == TokenType.STRING:
            return Literal(token.lexeme[1:-1], token.lexeme, "string", span), cursor.advance()

        if token.is_keyword:
            if token.lexeme in ("true", "false"):
                literal = Literal(token.lexeme == "true", token.lexeme, "boolean", span)
                return literal, cursor.advance()
            if token.lexeme == "nil":
                return Literal(None, token.lexeme, "nil", span), cursor.advance()
            if token.lexeme == "this":
                return self._parse_postfix(Identifier("this", span), cursor.advance())

        if token.is_identifier:
            return self._parse_postfix(Identifier(token.lexeme, span), cursor.advance())

        if token.type == TokenType.SYMBOL:
            if token.lexeme == "(":
                expression, cursor = self._parse_expression(cursor.advance())
                _, cursor = self._expect(cursor, ")", "Expected ')' after expression")
                return expression, cursor
            if token.lexeme == "[":
                return self._parse_array(cursor)
            if token.lexeme == "{":
                return self._parse_object(cursor)

        raise create_unexpected_token_error(cursor)

    def _parse_postfix(self, expression: Expression,
                       cursor: TokenCursor) -> Tuple[Expression, TokenCursor]:
        """Any chain of calls and member accesses, e.g. ``a.b(1).c(2)(3)``."""
        while True:
            if cursor.check("("):
                arguments, cursor = self._parse_expression_list(
                    cursor.advance(), ")", "Expected ')' to close function call"
                )
                span = SourceSpan(expression.start, cursor.previous().end)
                expression = CallExpression(expression, arguments, span)
            elif cursor.check("."):
                cursor = cursor.advance()
                token = cursor.peek()
                if token is None or not token.is_identifier:
                    raise create_missing_token_error("Expected identifier after '.'", cursor)
                member = Identifier(token.lexeme, SourceSpan(token.start, token.end))
                cursor = cursor.advance()
                expression = MemberExpression(expression, member, SourceSpan(expression.start, member.end))
            else:
                return expression, cursor

    def _parse_expression_list(self, cursor: TokenCursor, closing: str,
                               message: str) -> Tuple[List[Expression], TokenCursor]:
        """Comma-separated expressions followed by a required closing token."""
        items: List[Expression] = []
        if not cursor.check(closing):
            item, cursor = self._parse_expression(cursor)
            items.append(item)
            while cursor.check(","):
                item, cursor = self._parse_expression(cursor.advance())
                items.append(item)
        _, cursor = self._expect(cursor, closing, message)
        return items, cursor

    def _parse_array(self, cursor: TokenCursor) -> Tuple[ArrayExpression, TokenCursor]:
        start = cursor.peek().start
        elements, cursor = self._parse_expression_list(
            cursor.advance(), "]", "Expected ']' to close array"
        )
        return ArrayExpression(elements, SourceSpan(start, cursor.previous().end)), cursor

    def _parse_object(self, cursor: TokenCursor) -> Tuple[ObjectExpression, TokenCursor]:
        start = cursor.peek().start
        cursor = cursor.advance()  # '{'

        properties: List[Property] = []
        if not cursor.check("}"):
            prop, cursor = self._parse_property(cursor)
            properties.append(prop)
            while cursor.check(","):
                prop, cursor = self._parse_property(cursor.advance())
                properties.append(prop)

        close, cursor = self._expect(cursor, "}", "Expected '}' to close object")
        return ObjectExpression(properties, SourceSpan(start, close.end)), cursor

    def _parse_property(self, cursor: TokenCursor) -> Tuple[Property, TokenCursor]:
        token = cursor.peek()
        if token is None or token.type != TokenType.STRING:
            raise create_missing_token_error("Expected string key for object property", cursor)
        key = Literal(token.lexeme[1:-1], token.lexeme, "string", SourceSpan(token.start, token.end))
        cursor = cursor.advance()

        _, cursor = self._expect(cursor, ":", "Expected ':' after object property key")
        value, cursor = self._parse_expression(cursor)
        return Property(key, value, SourceSpan(key.start, value.end)), cursor


def parse(text: str, filename: str = "<unknown>") -> Program:
    """
    Tokenize and parse a document.

    Empty or whitespace-only text yields an empty Program without tokenizing.

    Raises:
        LexerError: on an unterminated string literal
    """
    if not text or not text.strip():
        return Program([], [], SourceSpan(0, len(text or "")))
    tokens = Lexer(text, filename).tokenize()
    return Parser(tokens, text, filename).parse()
