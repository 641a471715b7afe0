"""Single-pass compiler for bytelox.

Parsing and code generation are fused: a Pratt (precedence climbing)
expression parser emits instructions as it recognizes each construct, so no
syntax tree is ever built. Statements are parsed by recursive descent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from types import MappingProxyType
from typing import Mapping

from bytelox.errors import AT_END, CompileError, Diagnostic, Location
from bytelox.lexer import Lexer
from bytelox.opcode import (
    Constant,
    DefineGlobal,
    GetGlobal,
    Instruction,
    OpCode,
    SetGlobal,
)
from bytelox.source import Span
from bytelox.tokens import STATEMENT_STARTS, Token, TokenKind
from bytelox.value import Number, String

logger = logging.getLogger(__name__)


class Precedence(IntEnum):
    NONE = 0
    ASSIGNMENT = auto()  # =
    OR = auto()  # or
    AND = auto()  # and
    EQUALITY = auto()  # == !=
    COMPARISON = auto()  # < > <= >=
    TERM = auto()  # + -
    FACTOR = auto()  # * /
    UNARY = auto()  # ! -
    CALL = auto()  # . ()
    PRIMARY = auto()
    TOP = auto()

    def next(self) -> Precedence:
        return Precedence(min(self + 1, Precedence.TOP))


class PrefixRule(Enum):
    NONE = auto()
    GROUPING = auto()
    UNARY = auto()
    NUMBER = auto()
    LITERAL = auto()
    STRING = auto()
    VARIABLE = auto()


class InfixRule(Enum):
    NONE = auto()
    BINARY = auto()


@dataclass(frozen=True)
class ParseRule:
    prefix: PrefixRule = PrefixRule.NONE
    infix: InfixRule = InfixRule.NONE
    precedence: Precedence = Precedence.NONE


_EMPTY_RULE = ParseRule()

_RULES: Mapping[TokenKind, ParseRule] = MappingProxyType({
    TokenKind.LEFT_PAREN: ParseRule(prefix=PrefixRule.GROUPING),
    TokenKind.MINUS: ParseRule(PrefixRule.UNARY, InfixRule.BINARY, Precedence.TERM),
    TokenKind.PLUS: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.TERM),
    TokenKind.SLASH: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.FACTOR),
    TokenKind.STAR: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.FACTOR),
    TokenKind.BANG: ParseRule(prefix=PrefixRule.UNARY),
    TokenKind.BANG_EQUAL: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.EQUALITY),
    TokenKind.EQUAL_EQUAL: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.EQUALITY),
    TokenKind.GREATER: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.COMPARISON),
    TokenKind.GREATER_EQUAL: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.COMPARISON),
    TokenKind.LESS: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.COMPARISON),
    TokenKind.LESS_EQUAL: ParseRule(infix=InfixRule.BINARY, precedence=Precedence.COMPARISON),
    TokenKind.IDENTIFIER: ParseRule(prefix=PrefixRule.VARIABLE),
    TokenKind.STRING: ParseRule(prefix=PrefixRule.STRING),
    TokenKind.NUMBER: ParseRule(prefix=PrefixRule.NUMBER),
    TokenKind.FALSE: ParseRule(prefix=PrefixRule.LITERAL),
    TokenKind.NIL: ParseRule(prefix=PrefixRule.LITERAL),
    TokenKind.TRUE: ParseRule(prefix=PrefixRule.LITERAL),
})

# Instructions emitted for each binary operator; != and the inclusive
# comparisons are desugared into a comparison followed by NOT.
_BINARY_OPS: Mapping[TokenKind, tuple[OpCode, ...]] = MappingProxyType({
    TokenKind.PLUS: (OpCode.ADD,),
    TokenKind.MINUS: (OpCode.SUBTRACT,),
    TokenKind.STAR: (OpCode.MULTIPLY,),
    TokenKind.SLASH: (OpCode.DIVIDE,),
    TokenKind.EQUAL_EQUAL: (OpCode.EQUAL,),
    TokenKind.BANG_EQUAL: (OpCode.EQUAL, OpCode.NOT),
    TokenKind.GREATER: (OpCode.GREATER,),
    TokenKind.GREATER_EQUAL: (OpCode.LESS, OpCode.NOT),
    TokenKind.LESS: (OpCode.LESS,),
    TokenKind.LESS_EQUAL: (OpCode.GREATER, OpCode.NOT),
})

_LITERALS: Mapping[TokenKind, OpCode] = MappingProxyType({
    TokenKind.FALSE: OpCode.FALSE,
    TokenKind.NIL: OpCode.NIL,
    TokenKind.TRUE: OpCode.TRUE,
})


def get_rule(kind: TokenKind) -> ParseRule:
    return _RULES.get(kind, _EMPTY_RULE)


# Each nested expression costs a handful of Python frames.
MAX_NESTING = 100


class Compiler:
    """Compiles bytelox source text into a flat instruction list."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.lexer = Lexer(source)
        eof = Token(TokenKind.EOF, None, Span(0, 0, 1))
        self.current = eof
        self.previous = eof
        self.had_error = False
        self.panic_mode = False
        self.depth = 0
        self.instructions: list[Instruction] = []
        self.diagnostics: list[Diagnostic] = []

    def compile(self) -> list[Instruction]:
        """Compile the whole source. Raises CompileError on any error."""
        self._advance()
        while not self._match(TokenKind.EOF):
            self._declaration()
        self._emit(OpCode.RETURN)

        if self.had_error:
            raise CompileError(self.diagnostics)
        logger.debug("compiled %d instruction(s)", len(self.instructions))
        return self.instructions

    # ── Token access ─────────────────────────────────────────────

    def _advance(self) -> None:
        self.previous = self.current
        while True:
            self.current = self.lexer.scan_token()
            if self.current.kind == TokenKind.COMMENT:
                continue
            if self.current.kind != TokenKind.ERROR:
                break
            self._error_at_current(str(self.current.value))

    def _check(self, kind: TokenKind) -> bool:
        return self.current.kind == kind

    def _match(self, kind: TokenKind) -> bool:
        if not self._check(kind):
            return False
        self._advance()
        return True

    def _consume(self, kind: TokenKind, message: str) -> None:
        if self._check(kind):
            self._advance()
            return
        self._error_at_current(message)

    # ── Errors ───────────────────────────────────────────────────

    def _error_at_current(self, message: str) -> None:
        self._error_at(self.current, message)

    def _error(self, message: str) -> None:
        self._error_at(self.previous, message)

    def _error_at(self, token: Token, message: str) -> None:
        if self.panic_mode:
            return
        self.panic_mode = True
        self.had_error = True

        location: Location
        if token.kind == TokenKind.EOF:
            location = AT_END
        elif token.kind == TokenKind.ERROR:
            location = None
        else:
            location = token.span
        self.diagnostics.append(Diagnostic(token.line, message, location))

    def _synchronize(self) -> None:
        """Skip tokens until a statement boundary, then leave panic mode."""
        self.panic_mode = False
        while not self._check(TokenKind.EOF):
            if self.previous.kind == TokenKind.SEMICOLON:
                return
            if self.current.kind in STATEMENT_STARTS:
                return
            self._advance()

    # ── Emission ─────────────────────────────────────────────────

    def _emit(self, *instructions: Instruction) -> None:
        self.instructions.extend(instructions)

    # ── Declarations and statements ──────────────────────────────

    def _declaration(self) -> None:
        if self._match(TokenKind.VAR):
            self._var_declaration()
        else:
            self._statement()

        if self.panic_mode:
            self._synchronize()

    def _var_declaration(self) -> None:
        self._consume(TokenKind.IDENTIFIER, "Expect variable name.")
        name = self.previous.value if self.previous.kind == TokenKind.IDENTIFIER else None

        if self._match(TokenKind.EQUAL):
            self._expression()
        else:
            self._emit(OpCode.NIL)
        self._consume(TokenKind.SEMICOLON, "Expect ';' after variable declaration.")

        if isinstance(name, str):
            self._emit(DefineGlobal(name))

    def _statement(self) -> None:
        if self._match(TokenKind.PRINT):
            self._print_statement()
        else:
            self._expression_statement()

    def _print_statement(self) -> None:
        self._expression()
        self._consume(TokenKind.SEMICOLON, "Expect ';' after value.")
        self._emit(OpCode.PRINT)

    def _expression_statement(self) -> None:
        self._expression()
        self._consume(TokenKind.SEMICOLON, "Expect ';' after expression.")
        self._emit(OpCode.POP)

    # ── Expressions ──────────────────────────────────────────────

    def _expression(self) -> None:
        self._parse_precedence(Precedence.ASSIGNMENT)

    def _parse_precedence(self, precedence: Precedence) -> None:
        if self.depth >= MAX_NESTING:
            self._error_at_current("Expression nesting too deep.")
            return
        self.depth += 1
        try:
            self._parse_operand(precedence)
        finally:
            self.depth -= 1

    def _parse_operand(self, precedence: Precedence) -> None:
        self._advance()
        prefix = get_rule(self.previous.kind).prefix
        if prefix == PrefixRule.NONE:
            self._error("Expect expression.")
            return

        can_assign = precedence <= Precedence.ASSIGNMENT
        self._dispatch_prefix(prefix, can_assign)

        while precedence <= get_rule(self.current.kind).precedence:
            self._advance()
            infix = get_rule(self.previous.kind).infix
            self._dispatch_infix(infix)

        if can_assign and self._match(TokenKind.EQUAL):
            self._error("Invalid assignment target.")

    def _dispatch_prefix(self, rule: PrefixRule, can_assign: bool) -> None:
        match rule:
            case PrefixRule.GROUPING:
                self._grouping()
            case PrefixRule.UNARY:
                self._unary()
            case PrefixRule.NUMBER:
                self._number()
            case PrefixRule.LITERAL:
                self._literal()
            case PrefixRule.STRING:
                self._string()
            case PrefixRule.VARIABLE:
                self._variable(can_assign)
            case PrefixRule.NONE:
                self._error("Expect expression.")

    def _dispatch_infix(self, rule: InfixRule) -> None:
        match rule:
            case InfixRule.BINARY:
                self._binary()
            case InfixRule.NONE:
                self._error("Expect expression.")

    def _grouping(self) -> None:
        self._expression()
        self._consume(TokenKind.RIGHT_PAREN, "Expect ')' after expression.")

    def _unary(self) -> None:
        operator = self.previous.kind
        self._parse_precedence(Precedence.UNARY)

        match operator:
            case TokenKind.MINUS:
                self._emit(OpCode.NEGATE)
            case TokenKind.BANG:
                self._emit(OpCode.NOT)

    def _binary(self) -> None:
        operator = self.previous.kind
        rule = get_rule(operator)
        self._parse_precedence(rule.precedence.next())
        self._emit(*_BINARY_OPS[operator])

    def _number(self) -> None:
        match self.previous.value:
            case float(value):
                self._emit(Constant(Number(value)))

    def _literal(self) -> None:
        self._emit(_LITERALS[self.previous.kind])

    def _string(self) -> None:
        match self.previous.value:
            case str(value):
                self._emit(Constant(String(value)))

    def _variable(self, can_assign: bool) -> None:
        name = str(self.previous.value)

        if can_assign and self._match(TokenKind.EQUAL):
            self._expression()
            self._emit(SetGlobal(name))
        else:
            self._emit(GetGlobal(name))


def compile_source(source: str) -> list[Instruction]:
    """Compile ``source`` with a fresh compiler."""
    return Compiler(source).compile()
