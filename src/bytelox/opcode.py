"""The closed bytecode instruction set shared by the compiler and the VM."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from bytelox.value import Value


class OpCode(Enum):
    """Instructions that carry no operand."""

    NIL = "OP_NIL"
    TRUE = "OP_TRUE"
    FALSE = "OP_FALSE"
    NOT = "OP_NOT"
    NEGATE = "OP_NEGATE"
    EQUAL = "OP_EQUAL"
    GREATER = "OP_GREATER"
    LESS = "OP_LESS"
    ADD = "OP_ADD"
    SUBTRACT = "OP_SUBTRACT"
    MULTIPLY = "OP_MULTIPLY"
    DIVIDE = "OP_DIVIDE"
    PRINT = "OP_PRINT"
    POP = "OP_POP"
    RETURN = "OP_RETURN"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Constant:
    value: Value

    def __str__(self) -> str:
        return f"OP_CONSTANT: {self.value}"


@dataclass(frozen=True)
class DefineGlobal:
    name: str

    def __str__(self) -> str:
        return f"OP_DEFINE_GLOBAL: {self.name}"


@dataclass(frozen=True)
class GetGlobal:
    name: str

    def __str__(self) -> str:
        return f"OP_GET_GLOBAL: {self.name}"


@dataclass(frozen=True)
class SetGlobal:
    name: str

    def __str__(self) -> str:
        return f"OP_SET_GLOBAL: {self.name}"


Instruction = Union[OpCode, Constant, DefineGlobal, GetGlobal, SetGlobal]

ARITHMETIC = frozenset({
    OpCode.ADD,
    OpCode.SUBTRACT,
    OpCode.MULTIPLY,
    OpCode.DIVIDE,
})
