"""Tests for runtime values, instructions and disassembly."""

from __future__ import annotations

from bytelox.compiler import compile_source
from bytelox.debug import disassemble, format_stack
from bytelox.opcode import Constant, DefineGlobal, GetGlobal, OpCode, SetGlobal
from bytelox.value import (
    FALSE,
    NIL,
    TRUE,
    Bool,
    Number,
    String,
    format_number,
    is_falsey,
    values_equal,
    values_greater,
    values_less,
)


class TestValues:
    def test_falsiness(self):
        assert is_falsey(NIL)
        assert is_falsey(FALSE)
        assert not is_falsey(TRUE)
        assert not is_falsey(Number(0.0))
        assert not is_falsey(String(""))

    def test_equality_same_variant(self):
        assert values_equal(Number(1.0), Number(1.0))
        assert values_equal(String("a"), String("a"))
        assert values_equal(NIL, NIL)
        assert not values_equal(Bool(True), Bool(False))

    def test_equality_cross_variant(self):
        assert not values_equal(Number(1.0), Bool(True))
        assert not values_equal(Number(0.0), NIL)
        assert not values_equal(String("nil"), NIL)

    def test_nan_is_not_equal_to_itself(self):
        nan = Number(float("nan"))
        assert not values_equal(nan, nan)

    def test_ordering(self):
        assert values_less(Number(1.0), Number(2.0))
        assert values_greater(String("b"), String("a"))
        assert values_greater(TRUE, FALSE)
        assert not values_less(NIL, NIL)
        assert not values_greater(Number(2.0), String("1"))

    def test_printed_form(self):
        assert str(Number(10.0)) == "10"
        assert str(Number(2.5)) == "2.5"
        assert str(TRUE) == "true"
        assert str(NIL) == "nil"
        assert str(String("text")) == "text"

    def test_format_number(self):
        assert format_number(1e21) == "1000000000000000000000"
        assert format_number(-3.0) == "-3"
        assert format_number(0.1) == "0.1"
        assert format_number(float("inf")) == "inf"

    def test_format_number_shortest_digits(self):
        assert format_number(1e23) == "100000000000000000000000"
        assert format_number(1e-7) == "0.0000001"
        assert format_number(123456.789) == "123456.789"
        assert format_number(-0.0) == "-0"


class TestInstructions:
    def test_mnemonics(self):
        assert str(OpCode.ADD) == "OP_ADD"
        assert str(OpCode.RETURN) == "OP_RETURN"
        assert str(Constant(Number(1.2))) == "OP_CONSTANT: 1.2"
        assert str(DefineGlobal("x")) == "OP_DEFINE_GLOBAL: x"
        assert str(GetGlobal("x")) == "OP_GET_GLOBAL: x"
        assert str(SetGlobal("x")) == "OP_SET_GLOBAL: x"

    def test_structural_equality(self):
        assert Constant(String("a")) == Constant(String("a"))
        assert Constant(Number(1.0)) != Constant(Bool(True))

    def test_disassemble(self):
        listing = disassemble(compile_source("var x = 1.2;"), name="script")
        assert listing.splitlines() == [
            "== script ==",
            "0000 OP_CONSTANT: 1.2",
            "0001 OP_DEFINE_GLOBAL: x",
            "0002 OP_RETURN",
        ]

    def test_format_stack(self):
        assert format_stack([Number(1.0), String("a")]) == "[ 1 ][ a ]"
        assert format_stack([]) == ""
