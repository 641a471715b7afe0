"""Diagnostics and error types for compilation and execution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union

from bytelox.source import Span

# ANSI color codes
_RED = "\033[1;31m"
_BOLD = "\033[1m"
_RESET = "\033[0m"

AT_END: Literal["end"] = "end"

Location = Union[Span, Literal["end"], None]


@dataclass(frozen=True)
class Diagnostic:
    """A single compile-time error report."""

    line: int
    message: str
    location: Location = None

    def where(self) -> str:
        if self.location is None:
            return ""
        if self.location == AT_END:
            return " at end"
        return f" at {self.location}"

    def render(self) -> str:
        return f"[line {self.line}] Error{self.where()}: {self.message}"


class DiagnosticRenderer:
    """Renders diagnostics as one line each, optionally with colors."""

    def __init__(self, *, color: bool = False) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic) -> str:
        return (
            f"[line {diag.line}] {self._c(_RED)}Error{self._c(_RESET)}"
            f"{diag.where()}: {self._c(_BOLD)}{diag.message}{self._c(_RESET)}"
        )

    def render_runtime(self, error: LoxRuntimeError) -> str:
        return f"{self._c(_RED)}{error.message}{self._c(_RESET)}"


class CompileError(Exception):
    """Compilation failed; carries every diagnostic that was reported."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


class LoxRuntimeError(Exception):
    """An operand-type or name violation detected while executing bytecode."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InterpretResult(Enum):
    OK = "ok"
    COMPILE_ERROR = "compile error"
    RUNTIME_ERROR = "runtime error"

    @property
    def ok(self) -> bool:
        return self is InterpretResult.OK
