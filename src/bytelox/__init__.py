"""bytelox: a bytecode compiler and stack virtual machine for a small Lox dialect."""

from bytelox.compiler import Compiler, compile_source
from bytelox.errors import CompileError, Diagnostic, InterpretResult, LoxRuntimeError
from bytelox.lexer import Lexer
from bytelox.vm import VM, interpret

__version__ = "0.1.0"

__all__ = [
    "Compiler",
    "CompileError",
    "Diagnostic",
    "InterpretResult",
    "Lexer",
    "LoxRuntimeError",
    "VM",
    "compile_source",
    "interpret",
]
