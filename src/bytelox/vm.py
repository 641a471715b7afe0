"""Stack-based virtual machine for bytelox bytecode."""

from __future__ import annotations

import logging
import math
import sys
from collections.abc import Sequence
from enum import Enum, auto
from typing import TextIO

from bytelox.compiler import Compiler
from bytelox.debug import disassemble_instruction, format_stack
from bytelox.errors import (
    CompileError,
    DiagnosticRenderer,
    InterpretResult,
    LoxRuntimeError,
)
from bytelox.opcode import (
    ARITHMETIC,
    Constant,
    DefineGlobal,
    GetGlobal,
    Instruction,
    OpCode,
    SetGlobal,
)
from bytelox.value import (
    FALSE,
    NIL,
    TRUE,
    Bool,
    Number,
    String,
    Value,
    is_falsey,
    values_equal,
    values_greater,
    values_less,
)

logger = logging.getLogger(__name__)


class VMState(Enum):
    READY = auto()
    RUNNING = auto()
    HALTED_OK = auto()
    HALTED_ERROR = auto()


class VM:
    """Executes instruction sequences against an operand stack.

    Globals live on the instance and survive across ``run`` and
    ``interpret`` calls; the operand stack is reset for every run.
    """

    def __init__(
        self,
        *,
        out: TextIO | None = None,
        err: TextIO | None = None,
        trace: bool = False,
        color: bool = False,
    ) -> None:
        self._out = out
        self._err = err
        self.trace = trace
        self.renderer = DiagnosticRenderer(color=color)
        self.instructions: Sequence[Instruction] = ()
        self.ip = 0
        self.stack: list[Value] = []
        self.globals: dict[str, Value] = {}
        self.state = VMState.READY

    # Resolved lazily so pytest's capsys and click's CliRunner see the output.
    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def interpret(self, source: str) -> InterpretResult:
        """Compile and run ``source``, reporting any error on the error stream."""
        try:
            instructions = Compiler(source).compile()
        except CompileError as e:
            for diag in e.diagnostics:
                print(self.renderer.render(diag), file=self.err)
            return InterpretResult.COMPILE_ERROR

        try:
            self.run(instructions)
        except LoxRuntimeError as e:
            print(self.renderer.render_runtime(e), file=self.err)
            return InterpretResult.RUNTIME_ERROR
        return InterpretResult.OK

    def run(self, instructions: Sequence[Instruction]) -> None:
        """Execute ``instructions`` until RETURN or the end of the sequence."""
        self.instructions = instructions
        self.ip = 0
        self.stack = []
        self.state = VMState.RUNNING

        try:
            while self.ip < len(self.instructions):
                instruction = self.instructions[self.ip]
                if self.trace:
                    logger.debug("          %s", format_stack(self.stack))
                    logger.debug("%s", disassemble_instruction(self.ip, instruction))
                self.ip += 1
                if instruction is OpCode.RETURN:
                    break
                self._execute(instruction)
        except LoxRuntimeError:
            self.state = VMState.HALTED_ERROR
            raise
        self.state = VMState.HALTED_OK

    def _push(self, value: Value) -> None:
        self.stack.append(value)

    def _pop(self) -> Value:
        return self.stack.pop()

    def _peek(self) -> Value:
        return self.stack[-1]

    def _execute(self, instruction: Instruction) -> None:
        match instruction:
            case Constant(value):
                self._push(value)
            case OpCode.NIL:
                self._push(NIL)
            case OpCode.TRUE:
                self._push(TRUE)
            case OpCode.FALSE:
                self._push(FALSE)
            case OpCode.NEGATE:
                operand = self._pop()
                if not isinstance(operand, Number):
                    raise LoxRuntimeError("Operand must be a number.")
                self._push(Number(-operand.value))
            case OpCode.NOT:
                self._push(Bool(is_falsey(self._pop())))
            case OpCode() if instruction in ARITHMETIC:
                self._binary_op(instruction)
            case OpCode.EQUAL:
                b = self._pop()
                a = self._pop()
                self._push(Bool(values_equal(a, b)))
            case OpCode.GREATER:
                b = self._pop()
                a = self._pop()
                self._push(Bool(values_greater(a, b)))
            case OpCode.LESS:
                b = self._pop()
                a = self._pop()
                self._push(Bool(values_less(a, b)))
            case OpCode.PRINT:
                print(self._pop(), file=self.out)
            case OpCode.POP:
                self._pop()
            case DefineGlobal(name):
                self.globals[name] = self._pop()
            case GetGlobal(name):
                if name not in self.globals:
                    raise LoxRuntimeError(f"Undefined variable '{name}'")
                self._push(self.globals[name])
            case SetGlobal(name):
                if name not in self.globals:
                    raise LoxRuntimeError(f"Undefined variable '{name}'")
                self.globals[name] = self._peek()
            case OpCode.RETURN:
                pass

    def _binary_op(self, op: OpCode) -> None:
        b = self._pop()
        a = self._pop()

        match a, b:
            case Number(x), Number(y):
                self._push(Number(_arithmetic(op, x, y)))
            case String(x), String(y) if op is OpCode.ADD:
                self._push(String(x + y))
            case _:
                raise LoxRuntimeError("Operands must be two numbers or two strings.")


def _arithmetic(op: OpCode, a: float, b: float) -> float:
    match op:
        case OpCode.ADD:
            return a + b
        case OpCode.SUBTRACT:
            return a - b
        case OpCode.MULTIPLY:
            return a * b
        case OpCode.DIVIDE:
            return _divide(a, b)
    raise ValueError(f"not an arithmetic instruction: {op}")


def _divide(a: float, b: float) -> float:
    # IEEE-754 semantics; Python raises on float division by zero.
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def interpret(source: str) -> InterpretResult:
    """Compile and run ``source`` on a fresh VM."""
    return VM().interpret(source)
