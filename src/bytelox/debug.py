"""Disassembly of instruction sequences."""

from __future__ import annotations

from collections.abc import Sequence

from bytelox.opcode import Instruction
from bytelox.value import Value


def disassemble_instruction(index: int, instruction: Instruction) -> str:
    return f"{index:04d} {instruction}"


def disassemble(instructions: Sequence[Instruction], name: str | None = None) -> str:
    """Return a numbered listing, one instruction per line."""
    lines: list[str] = []
    if name is not None:
        lines.append(f"== {name} ==")
    for index, instruction in enumerate(instructions):
        lines.append(disassemble_instruction(index, instruction))
    return "\n".join(lines)


def format_stack(stack: Sequence[Value]) -> str:
    return "".join(f"[ {value} ]" for value in stack)
