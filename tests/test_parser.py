"""
Test suite for the Neutron parser.

Tests cover:
- Statement and expression forms
- Operator precedence and associativity
- Missing-semicolon diagnostics
- Error recovery at statement boundaries
- Structural invariants and idempotence

Author: xwest
"""

import math
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from neutron.lexer import LexerError, tokenize
from neutron.parser import (
    Parser, parse, TokenCursor, StatementResult,
    Program, VariableDeclaration, IfStatement, WhileStatement, ForStatement,
    BlockStatement, FunctionDeclaration, ClassDeclaration, ReturnStatement,
    ExpressionStatement, AssignmentExpression, BinaryExpression, LogicalExpression,
    UnaryExpression, CallExpression, MemberExpression, ArrayExpression,
    ObjectExpression, Identifier, Literal
)


def walk(node):
    """Yield a node and all of its descendants."""
    yield node
    for child in node.children():
        yield from walk(child)


class TestParserBasics(unittest.TestCase):
    """Test cases for well-formed input."""

    def _parse_clean(self, code: str) -> Program:
        program = parse(code)
        self.assertEqual(program.syntax_errors, [],
                         f"Unexpected errors: {[e.message for e in program.syntax_errors]}")
        return program

    def _expression(self, code: str):
        """Parse ``x = <code>;`` and return the assigned expression."""
        program = self._parse_clean(f"x = {code};")
        return program.statements[0].right

    def test_empty_input(self):
        for code in ("", "   \n\t", "// only a comment"):
            program = parse(code)
            self.assertIsInstance(program, Program)
            self.assertEqual(program.statements, [])
            self.assertEqual(program.syntax_errors, [])

    def test_variable_declaration(self):
        program = self._parse_clean("var int x = 5;")
        decl = program.statements[0]

        self.assertIsInstance(decl, VariableDeclaration)
        self.assertEqual(decl.var_type, "int")
        self.assertEqual(decl.name.name, "x")
        self.assertIsInstance(decl.init, Literal)
        self.assertEqual(decl.init.value, 5)
        self.assertEqual((decl.start, decl.end), (0, 14))

    def test_untyped_declaration_without_initializer(self):
        decl = self._parse_clean("var x;").statements[0]
        self.assertIsNone(decl.var_type)
        self.assertIsNone(decl.init)

    def test_assignment_is_detected_contextually(self):
        program = self._parse_clean("x = 1; x == 1;")

        self.assertIsInstance(program.statements[0], AssignmentExpression)
        self.assertEqual(program.statements[0].left.name, "x")
        self.assertIsInstance(program.statements[1], ExpressionStatement)
        self.assertIsInstance(program.statements[1].expression, BinaryExpression)

    def test_literals(self):
        self.assertEqual(self._expression('"hi"').value, "hi")
        self.assertEqual(self._expression("1.5").value, 1.5)
        self.assertIs(self._expression("true").value, True)

        nil = self._expression("nil")
        self.assertIsNone(nil.value)
        self.assertEqual(nil.literal_type, "nil")

        lenient = self._expression("1.2.3")
        self.assertEqual(lenient.raw, "1.2.3")
        self.assertTrue(math.isnan(lenient.value))

    def test_precedence(self):
        expr = self._expression("1 + 2 * 3")
        self.assertEqual(expr.operator, "+")
        self.assertEqual(expr.right.operator, "*")

        expr = self._expression("a or b and c")
        self.assertIsInstance(expr, LogicalExpression)
        self.assertEqual(expr.operator, "or")
        self.assertEqual(expr.right.operator, "and")

        expr = self._expression("a < b == c > d")
        self.assertEqual(expr.operator, "==")
        self.assertEqual(expr.left.operator, "<")
        self.assertEqual(expr.right.operator, ">")

    def test_left_associativity(self):
        expr = self._expression("a - b - c")
        self.assertEqual(expr.operator, "-")
        self.assertIsInstance(expr.left, BinaryExpression)
        self.assertEqual(expr.right.name, "c")

    def test_unary_operators(self):
        expr = self._expression("not a == b")
        self.assertEqual(expr.operator, "==")
        self.assertIsInstance(expr.left, UnaryExpression)
        self.assertEqual(expr.left.operator, "not")

        expr = self._expression("-1")
        self.assertIsInstance(expr, UnaryExpression)
        self.assertEqual(expr.operator, "-")

    def test_symbolic_logical_operators(self):
        expr = self._expression("a && b")
        self.assertIsInstance(expr, LogicalExpression)
        self.assertEqual(expr.operator, "and")

    def test_grouping(self):
        expr = self._expression("(1 + 2) * 3")
        self.assertEqual(expr.operator, "*")
        self.assertEqual(expr.left.operator, "+")

    def test_postfix_chains(self):
        expr = self._parse_clean("a.b.c(1)(2);").statements[0].expression

        self.assertIsInstance(expr, CallExpression)
        self.assertEqual(expr.arguments[0].value, 2)
        inner = expr.callee
        self.assertIsInstance(inner, CallExpression)
        self.assertIsInstance(inner.callee, MemberExpression)
        self.assertEqual(inner.callee.property.name, "c")
        self.assertIsInstance(inner.callee.obj, MemberExpression)

    def test_this_is_a_primary(self):
        expr = self._expression("this.name")
        self.assertIsInstance(expr, MemberExpression)
        self.assertEqual(expr.obj.name, "this")

    def test_array_and_object_literals(self):
        expr = self._expression('{"a": 1, "b": [1, 2]}')

        self.assertIsInstance(expr, ObjectExpression)
        self.assertEqual([p.key.value for p in expr.properties], ["a", "b"])
        self.assertIsInstance(expr.properties[1].value, ArrayExpression)
        self.assertEqual(len(expr.properties[1].value.elements), 2)
        self.assertEqual(self._expression("{}").properties, [])
        self.assertEqual(self._expression("[]").elements, [])

    def test_if_else_chains(self):
        stmt = self._parse_clean("if (a) { } else if (b) { } else { }").statements[0]
        self.assertIsInstance(stmt, IfStatement)
        self.assertIsInstance(stmt.alternate, IfStatement)
        self.assertIsInstance(stmt.alternate.alternate, BlockStatement)

        stmt = self._parse_clean("if (a) x(); elif (b) y();").statements[0]
        self.assertIsInstance(stmt.alternate, IfStatement)
        self.assertEqual(stmt.alternate.test.name, "b")

    def test_single_statement_body(self):
        stmt = self._parse_clean("if (x) say(x);").statements[0]
        self.assertIsInstance(stmt.consequent, BlockStatement)
        self.assertEqual(len(stmt.consequent.body), 1)
        self.assertIsInstance(stmt.consequent.body[0], ExpressionStatement)

    def test_while(self):
        stmt = self._parse_clean("while (i < 3) { i = i + 1; }").statements[0]
        self.assertIsInstance(stmt, WhileStatement)
        self.assertIsInstance(stmt.body.body[0], AssignmentExpression)

    def test_for(self):
        stmt = self._parse_clean("for (var int i = 0; i < 10; i = i + 1) { say(i); }").statements[0]

        self.assertIsInstance(stmt, ForStatement)
        self.assertIsInstance(stmt.init, VariableDeclaration)
        self.assertEqual(stmt.init.var_type, "int")
        self.assertEqual(stmt.test.operator, "<")
        self.assertIsInstance(stmt.update, AssignmentExpression)
        self.assertEqual(len(stmt.body.body), 1)

    def test_for_with_empty_clauses(self):
        stmt = self._parse_clean("for (;;) say(1);").statements[0]
        self.assertIsNone(stmt.init)
        self.assertIsNone(stmt.test)
        self.assertIsNone(stmt.update)

    def test_function_declaration(self):
        stmt = self._parse_clean("fun add(a, b) { return a + b; }").statements[0]

        self.assertIsInstance(stmt, FunctionDeclaration)
        self.assertEqual(stmt.name.name, "add")
        self.assertEqual([p.name for p in stmt.params], ["a", "b"])
        self.assertIsInstance(stmt.params[0], Identifier)
        ret = stmt.body.body[0]
        self.assertIsInstance(ret, ReturnStatement)
        self.assertEqual(ret.argument.operator, "+")

    def test_return_forms(self):
        program = self._parse_clean("fun f() { return } fun g() { return 1 }")
        self.assertIsNone(program.statements[0].body.body[0].argument)
        self.assertEqual(program.statements[1].body.body[0].argument.value, 1)

    def test_class_declaration(self):
        stmt = self._parse_clean("class Point { var x = 0; fun len() { return 0; } }").statements[0]

        self.assertIsInstance(stmt, ClassDeclaration)
        self.assertEqual(stmt.name.name, "Point")
        self.assertEqual(len(stmt.body.body), 2)

    def test_children_in_source_order(self):
        stmt = self._parse_clean("x = 1 + 2;").statements[0]

        self.assertEqual(stmt.children(), [stmt.left, stmt.right])
        self.assertEqual([child.value for child in stmt.right.children()], [1, 2])
        self.assertFalse(hasattr(stmt.right, "parent"))

    def test_class_api_with_tokens(self):
        code = "var x = 1;"
        program = Parser(tokenize(code), code).parse()
        self.assertEqual(len(program.statements), 1)


class TestMissingSemicolons(unittest.TestCase):
    """Soft terminator diagnostics."""

    STATEMENTS = [
        "var x = 1",
        "var int y",
        "x = 2",
        "say(x)",
        "a.b.c(1)(2)",
    ]

    def test_terminated_statements_have_no_errors(self):
        for statement in self.STATEMENTS:
            program = parse(statement + "; // trailing comment")
            self.assertEqual(program.syntax_errors, [], statement)

    def test_unterminated_statements_have_one_error(self):
        for statement in self.STATEMENTS:
            code = statement + " // trailing comment"
            program = parse(code)

            self.assertEqual(len(program.syntax_errors), 1, statement)
            error = program.syntax_errors[0]
            self.assertEqual(error.code, "P003")
            self.assertEqual(error.start, len(statement), statement)
            self.assertEqual(error.end, len(code), statement)
            # The statement's node is still produced
            self.assertEqual(len(program.statements), 1, statement)

    def test_messages_name_the_statement_kind(self):
        messages = [parse(code).syntax_errors[0].message for code in ("var x = 1", "say(1)", "x = 1")]
        self.assertEqual(messages, [
            "Missing semicolon at end of variable declaration",
            "Missing semicolon at end of statement",
            "Missing semicolon at end of assignment",
        ])

    def test_range_runs_to_end_of_line(self):
        program = parse("x = 1 // note\ny = 2;")

        self.assertEqual(len(program.syntax_errors), 1)
        error = program.syntax_errors[0]
        self.assertEqual((error.start, error.end), (5, 13))
        self.assertEqual(len(program.statements), 2)

    def test_for_separators_are_hard_errors(self):
        program = parse("for (var i = 0 i < 10; i = i + 1) {}")
        error = program.syntax_errors[0]
        self.assertEqual(error.message, "Expected ';' after for init")
        self.assertEqual(error.code, "P002")


class TestErrorRecovery(unittest.TestCase):
    """Recovery at statement boundaries."""

    def test_missing_paren_recovers(self):
        program = parse("if (x { say(1); }\nvar int y = 2;")

        self.assertEqual(len(program.syntax_errors), 1)
        error = program.syntax_errors[0]
        self.assertEqual(error.message, "Expected ')' after if condition")
        self.assertEqual((error.start, error.end), (6, 7))

        kinds = [type(stmt) for stmt in program.statements]
        self.assertEqual(kinds, [ExpressionStatement, VariableDeclaration])
        self.assertEqual(program.statements[1].name.name, "y")

    def test_fallback_tokens_are_skipped_silently(self):
        program = parse("5; 'str'; } x = 1;")

        self.assertEqual(program.syntax_errors, [])
        self.assertEqual(len(program.statements), 1)
        self.assertIsInstance(program.statements[0], AssignmentExpression)

    def test_stray_delimiters_do_not_stall(self):
        program = parse("{{{{ }}}} ) ( ] var x = 1;")
        self.assertIsInstance(program.statements[-1], VariableDeclaration)

    def test_unclosed_block_is_closed_implicitly(self):
        program = parse("while (x) { say(1);")

        self.assertEqual(program.syntax_errors, [])
        stmt = program.statements[0]
        self.assertEqual(len(stmt.body.body), 1)
        self.assertEqual(stmt.end, len("while (x) { say(1);"))

    def test_error_messages(self):
        cases = {
            "fun (a) {}": "Expected function name after 'fun'",
            "class Point var x;": "Expected '{' to start class body",
            "var o = {a: 1};": "Expected string key for object property",
            'var o = {"a" 1};': "Expected ':' after object property key",
            "var a = [1, 2;": "Expected ']' to close array",
            "say(1;": "Expected ')' to close function call",
            "x = a.;": "Expected identifier after '.'",
            "x = );": "Unexpected token ')'",
            "while x) {}": "Expected '(' after 'while'",
        }
        for code, message in cases.items():
            program = parse(code)
            self.assertTrue(program.syntax_errors, code)
            self.assertEqual(program.syntax_errors[0].message, message, code)

    def test_unexpected_end_of_input_points_at_last_token(self):
        program = parse("x = ")

        error = program.syntax_errors[0]
        self.assertEqual(error.message, "Unexpected end of input")
        self.assertEqual(error.code, "P010")
        self.assertEqual((error.start, error.end), (2, 3))

    def test_errors_inside_blocks_keep_the_enclosing_statement(self):
        program = parse("fun f() { var = 1; say(2); }")

        self.assertEqual(len(program.syntax_errors), 1)
        func = program.statements[0]
        self.assertIsInstance(func, FunctionDeclaration)
        self.assertIsInstance(func.body.body[-1], ExpressionStatement)

    def test_lexer_errors_propagate(self):
        with self.assertRaises(LexerError):
            parse('x = "abc')


class TestParserInvariants(unittest.TestCase):
    """Structural properties."""

    SAMPLE = """
    var int count = 0;
    fun bump(step) {
        count = count + step;
        if (count > 10) { return count } elif (count < 0) return 0;
    }
    class Box { var items = [1, 2, {"k": nil}]; }
    for (var i = 0; i < 3; i = i + 1) bump(i)
    while (not done) { poll(this.queue) }
    if (x { broken(); }
    """

    def test_spans_are_well_formed(self):
        program = parse(self.SAMPLE)
        for node in walk(program):
            self.assertGreaterEqual(node.end, node.start, repr(node))

    def test_reparse_is_idempotent(self):
        first = parse(self.SAMPLE)
        second = parse(self.SAMPLE)

        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertEqual(
            [(e.message, e.start, e.end) for e in first.syntax_errors],
            [(e.message, e.start, e.end) for e in second.syntax_errors],
        )

    def test_to_dict_shape(self):
        data = parse("var int x = 5;").to_dict()

        self.assertEqual(data["type"], "Program")
        decl = data["statements"][0]
        self.assertEqual(decl["type"], "VariableDeclaration")
        self.assertEqual(decl["name"]["name"], "x")
        self.assertEqual(decl["init"]["raw"], "5")
        self.assertEqual(data["syntax_errors"], [])

    def test_long_operator_chain(self):
        terms = 2000
        program = parse("total = " + " + ".join(["a"] * terms) + ";")
        self.assertEqual(program.syntax_errors, [])

        data = program.to_dict()
        node = data["statements"][0]["right"]
        depth = 0
        while node["type"] == "BinaryExpression":
            self.assertEqual(node["right"]["name"], "a")
            node = node["left"]
            depth += 1

        self.assertEqual(depth, terms - 1)
        self.assertEqual(node, {"type": "Identifier", "start": 8, "end": 9, "name": "a"})


class TestTokenCursor(unittest.TestCase):
    """Immutable cursor and statement outcome types."""

    def test_advance_returns_new_cursor(self):
        cursor = TokenCursor(tuple(tokenize("a b")))
        moved = cursor.advance()

        self.assertEqual(cursor.index, 0)
        self.assertEqual(moved.index, 1)
        self.assertEqual(moved.previous().lexeme, "a")
        self.assertTrue(moved.check("b"))

    def test_advance_clamps_at_end(self):
        cursor = TokenCursor(tuple(tokenize("a"))).advance().advance()

        self.assertTrue(cursor.at_end())
        self.assertIsNone(cursor.peek())
        self.assertEqual(cursor.last().lexeme, "a")

    def test_statement_result(self):
        cursor = TokenCursor(())
        result = StatementResult.success(None, cursor)
        self.assertTrue(result.ok)
        self.assertIsNone(result.node)


if __name__ == '__main__':
    unittest.main()
