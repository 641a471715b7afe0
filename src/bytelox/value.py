"""Runtime values for the bytelox virtual machine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class Number:
    value: float

    def __str__(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True)
class Bool:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Nil:
    def __str__(self) -> str:
        return "nil"


@dataclass(frozen=True)
class String:
    value: str

    def __str__(self) -> str:
        return self.value


Value = Union[Number, Bool, Nil, String]

NIL = Nil()
TRUE = Bool(True)
FALSE = Bool(False)


def format_number(num: float) -> str:
    """Render a number the way ``print`` shows it."""
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "inf" if num > 0 else "-inf"
    # Shortest round-trip digits, always in positional notation.
    text = format(Decimal(repr(num)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def is_falsey(value: Value) -> bool:
    match value:
        case Nil():
            return True
        case Bool(flag):
            return not flag
        case _:
            return False


def values_equal(a: Value, b: Value) -> bool:
    """Variant-matched equality; values of different variants are never equal."""
    match a, b:
        case Number(x), Number(y):
            return x == y
        case Bool(x), Bool(y):
            return x == y
        case Nil(), Nil():
            return True
        case String(x), String(y):
            return x == y
        case _:
            return False


def values_greater(a: Value, b: Value) -> bool:
    match a, b:
        case Number(x), Number(y):
            return x > y
        case Bool(x), Bool(y):
            return x > y
        case String(x), String(y):
            return x > y
        case _:
            return False


def values_less(a: Value, b: Value) -> bool:
    match a, b:
        case Number(x), Number(y):
            return x < y
        case Bool(x), Bool(y):
            return x < y
        case String(x), String(y):
            return x < y
        case _:
            return False
