"""bytelox command line interface."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from bytelox import __version__
from bytelox.compiler import Compiler
from bytelox.config import ByteloxConfig, discover_config
from bytelox.debug import disassemble
from bytelox.errors import CompileError, DiagnosticRenderer, InterpretResult
from bytelox.lexer import Lexer
from bytelox.vm import VM

# sysexits.h
EX_DATAERR = 65
EX_SOFTWARE = 70

_EXIT_CODES = {
    InterpretResult.OK: 0,
    InterpretResult.COMPILE_ERROR: EX_DATAERR,
    InterpretResult.RUNTIME_ERROR: EX_SOFTWARE,
}


def _setup_logging(trace: bool) -> None:
    if trace:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", stream=sys.stderr)


def _use_color() -> bool:
    return sys.stderr.isatty()


@click.group()
@click.version_option(__version__, prog_name="bytelox")
@click.pass_context
def main(ctx: click.Context) -> None:
    """The bytelox bytecode interpreter."""
    ctx.obj = discover_config()


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--trace", is_flag=True, help="Log the stack and each instruction.")
@click.pass_obj
def run(config: ByteloxConfig, file: str, trace: bool) -> None:
    """Compile and run a bytelox source file."""
    trace = trace or config.vm.trace
    _setup_logging(trace)

    source = Path(file).read_text()
    vm = VM(trace=trace, color=_use_color())
    result = vm.interpret(source)
    if not result.ok:
        raise SystemExit(_EXIT_CODES[result])


@main.command()
@click.option("--trace", is_flag=True, help="Log the stack and each instruction.")
@click.pass_obj
def repl(config: ByteloxConfig, trace: bool) -> None:
    """Read lines from stdin and interpret each one."""
    trace = trace or config.vm.trace
    _setup_logging(trace)

    stdin = click.get_text_stream("stdin")
    vm = VM(trace=trace, color=_use_color())
    while True:
        click.echo(config.repl.prompt, nl=False)
        line = stdin.readline()
        if not line:
            click.echo()
            return
        if not config.repl.persist_globals:
            vm = VM(trace=trace, color=_use_color())
        vm.interpret(line)


@main.command(name="disassemble")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def disassemble_cmd(file: str) -> None:
    """Compile a source file and print its instruction listing."""
    source = Path(file).read_text()
    try:
        instructions = Compiler(source).compile()
    except CompileError as e:
        renderer = DiagnosticRenderer(color=_use_color())
        for diag in e.diagnostics:
            click.echo(renderer.render(diag), err=True)
        raise SystemExit(EX_DATAERR)

    click.echo(disassemble(instructions, name=file))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--comments", is_flag=True, help="Include comment tokens.")
def tokens(file: str, comments: bool) -> None:
    """Print the token stream of a source file, one token per line."""
    source = Path(file).read_text()
    for tok in Lexer(source, keep_comments=comments):
        line = f"{tok.line:>4} {tok.start:>5}+{tok.length:<3} {tok.kind.name}"
        if tok.value is not None:
            line += f" {tok.value!r}"
        click.echo(line)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--color/--no-color", default=True, help="Emit ANSI colors.")
def highlight(file: str, color: bool) -> None:
    """Print a source file with syntax highlighting."""
    from bytelox.highlight import highlight_source

    source = Path(file).read_text()
    click.echo(highlight_source(source, color=color), nl=False)
