"""Tests for the bytelox compiler."""

from __future__ import annotations

import pytest

from bytelox.compiler import (
    MAX_NESTING,
    Compiler,
    Precedence,
    compile_source,
    get_rule,
)
from bytelox.errors import AT_END, CompileError
from bytelox.opcode import Constant, DefineGlobal, GetGlobal, OpCode, SetGlobal
from bytelox.source import Span
from bytelox.tokens import TokenKind
from bytelox.value import Number, String


def compile_ok(source: str) -> list:
    """Helper: compile source and drop the trailing RETURN."""
    instructions = Compiler(source).compile()
    assert instructions[-1] is OpCode.RETURN
    return instructions[:-1]


def compile_errors(source: str) -> list:
    """Helper: compile source, expecting failure; return the diagnostics."""
    with pytest.raises(CompileError) as excinfo:
        Compiler(source).compile()
    return excinfo.value.diagnostics


def num(value: float) -> Constant:
    return Constant(Number(value))


class TestCompilerExpressions:
    def test_number(self):
        assert compile_ok("1.2;") == [num(1.2), OpCode.POP]

    def test_string(self):
        assert compile_ok('"hi";') == [Constant(String("hi")), OpCode.POP]

    def test_literals(self):
        assert compile_ok("true; false; nil;") == [
            OpCode.TRUE, OpCode.POP,
            OpCode.FALSE, OpCode.POP,
            OpCode.NIL, OpCode.POP,
        ]

    def test_factor_binds_tighter_than_term(self):
        assert compile_ok("10 + 20 * 30;") == [
            num(10), num(20), num(30), OpCode.MULTIPLY, OpCode.ADD, OpCode.POP,
        ]

    def test_grouping_overrides_precedence(self):
        assert compile_ok("(10 + 20) * 30;") == [
            num(10), num(20), OpCode.ADD, num(30), OpCode.MULTIPLY, OpCode.POP,
        ]

    def test_left_associative(self):
        assert compile_ok("1 - 2 - 3;") == [
            num(1), num(2), OpCode.SUBTRACT, num(3), OpCode.SUBTRACT, OpCode.POP,
        ]

    def test_string_concatenation_left_associative(self):
        a, b, c, d = (Constant(String(s)) for s in "abcd")
        assert compile_ok('"a"+"b"+"c"+"d";') == [
            a, b, OpCode.ADD, c, OpCode.ADD, d, OpCode.ADD, OpCode.POP,
        ]

    def test_unary_binds_tighter_than_binary(self):
        assert compile_ok("-1 * 2;") == [
            num(1), OpCode.NEGATE, num(2), OpCode.MULTIPLY, OpCode.POP,
        ]

    def test_nested_unary(self):
        assert compile_ok("!!true;") == [OpCode.TRUE, OpCode.NOT, OpCode.NOT, OpCode.POP]

    def test_equality(self):
        assert compile_ok("10 == 10;") == [num(10), num(10), OpCode.EQUAL, OpCode.POP]

    def test_not_equal_desugars(self):
        assert compile_ok("10 != 20;") == [
            num(10), num(20), OpCode.EQUAL, OpCode.NOT, OpCode.POP,
        ]

    def test_greater_equal_desugars(self):
        assert compile_ok("1 >= 2;")[-3:] == [OpCode.LESS, OpCode.NOT, OpCode.POP]

    def test_less_equal_desugars(self):
        assert compile_ok("1 <= 2;")[-3:] == [OpCode.GREATER, OpCode.NOT, OpCode.POP]

    def test_comparison_binds_tighter_than_equality(self):
        assert compile_ok("1 < 2 == true;") == [
            num(1), num(2), OpCode.LESS, OpCode.TRUE, OpCode.EQUAL, OpCode.POP,
        ]

    def test_comments_ignored(self):
        assert compile_ok("// nothing\n1; // one\n") == [num(1), OpCode.POP]


class TestCompilerStatements:
    def test_print(self):
        assert compile_ok("print 1;") == [num(1), OpCode.PRINT]

    def test_var_with_initializer(self):
        assert compile_ok("var x = 10;") == [num(10), DefineGlobal("x")]

    def test_var_without_initializer(self):
        assert compile_ok("var x;") == [OpCode.NIL, DefineGlobal("x")]

    def test_variable_read(self):
        assert compile_ok("print x;") == [GetGlobal("x"), OpCode.PRINT]

    def test_assignment(self):
        assert compile_ok("x = 1;") == [num(1), SetGlobal("x"), OpCode.POP]

    def test_assignment_is_right_associative(self):
        assert compile_ok("a = b = 2;") == [
            num(2), SetGlobal("b"), SetGlobal("a"), OpCode.POP,
        ]

    def test_assignment_value_in_expression(self):
        assert compile_ok("print x = 3;") == [num(3), SetGlobal("x"), OpCode.PRINT]

    def test_empty_program(self):
        assert Compiler("").compile() == [OpCode.RETURN]

    def test_deterministic(self):
        source = 'var a = 1; var b = "s"; print a + 2 * -3 >= 4 != !nil;'
        assert compile_source(source) == compile_source(source)


class TestCompilerErrors:
    def test_unterminated_string(self):
        diags = compile_errors('"abc')
        assert diags[0].message == "Unterminated string"
        assert diags[0].location is None
        assert diags[0].render() == "[line 1] Error: Unterminated string"

    def test_unknown_token(self):
        diags = compile_errors("print @;")
        assert diags[0].message == "Unknown Token @"

    def test_missing_semicolon_at_end(self):
        diags = compile_errors("print 1")
        assert len(diags) == 1
        assert diags[0].message == "Expect ';' after value."
        assert diags[0].location == AT_END
        assert diags[0].render() == "[line 1] Error at end: Expect ';' after value."

    def test_error_location(self):
        diags = compile_errors("1 + ;")
        assert diags[0].message == "Expect expression."
        assert diags[0].location == Span(4, 1, 1)
        assert diags[0].render() == "[line 1] Error at 4 to 5: Expect expression."

    def test_missing_paren(self):
        diags = compile_errors("(1 + 2;")
        assert diags[0].message == "Expect ')' after expression."

    def test_missing_variable_name(self):
        diags = compile_errors("var 1 = 2;")
        assert diags[0].message == "Expect variable name."

    def test_missing_semicolon_after_declaration(self):
        diags = compile_errors("var x = 1 print x;")
        assert diags[0].message == "Expect ';' after variable declaration."

    def test_missing_semicolon_after_expression(self):
        diags = compile_errors("1 2;")
        assert diags[0].message == "Expect ';' after expression."

    def test_invalid_assignment_target(self):
        diags = compile_errors("a + b = c;")
        assert [d.message for d in diags] == ["Invalid assignment target."]

    def test_invalid_assignment_to_negation(self):
        diags = compile_errors("-a = 1;")
        assert diags[0].message == "Invalid assignment target."

    def test_panic_mode_suppresses_cascade(self):
        diags = compile_errors("print + + + ;")
        assert len(diags) == 1

    def test_synchronize_after_semicolon(self):
        diags = compile_errors("print ; print ;")
        assert len(diags) == 2

    def test_synchronize_at_statement_keyword(self):
        diags = compile_errors("x = ) var y print ;")
        assert [d.message for d in diags] == [
            "Expect expression.",
            "Expect ';' after variable declaration.",
            "Expect expression.",
        ]

    def test_deep_grouping_nesting(self):
        diags = compile_errors("print " + "(" * 1000 + "1" + ")" * 1000 + ";")
        assert [d.message for d in diags] == ["Expression nesting too deep."]
        assert diags[0].location == Span(6 + MAX_NESTING, 1, 1)

    def test_deep_unary_nesting(self):
        diags = compile_errors("print " + "-" * 600 + "1;")
        assert [d.message for d in diags] == ["Expression nesting too deep."]

    def test_deep_assignment_chain(self):
        diags = compile_errors("a" + " = a" * 500 + ";")
        assert [d.message for d in diags] == ["Expression nesting too deep."]

    def test_nesting_below_limit_compiles(self):
        depth = MAX_NESTING - 1
        assert compile_ok("(" * depth + "1" + ")" * depth + ";") == [num(1.0), OpCode.POP]

    def test_lines_reported(self):
        diags = compile_errors("print 1;\n\nprint ;")
        assert diags[0].line == 3

    def test_error_after_valid_code(self):
        diags = compile_errors("var ok = 1; print ok; ok +;")
        assert len(diags) == 1


class TestParseRules:
    def test_precedence_order(self):
        assert (Precedence.NONE < Precedence.ASSIGNMENT < Precedence.OR
                < Precedence.AND < Precedence.EQUALITY < Precedence.COMPARISON
                < Precedence.TERM < Precedence.FACTOR < Precedence.UNARY
                < Precedence.CALL < Precedence.PRIMARY < Precedence.TOP)

    def test_next_saturates(self):
        assert Precedence.TERM.next() is Precedence.FACTOR
        assert Precedence.TOP.next() is Precedence.TOP

    def test_rule_lookup(self):
        assert get_rule(TokenKind.STAR).precedence == Precedence.FACTOR
        assert get_rule(TokenKind.MINUS).precedence == Precedence.TERM
        assert get_rule(TokenKind.SEMICOLON).precedence == Precedence.NONE
        assert get_rule(TokenKind.AND).precedence == Precedence.NONE
